import logging
from enum import Enum, auto
from typing import Any, Dict, List, Optional, TypedDict, cast

import requests


logger = logging.getLogger(__name__)


class Timeline(Enum):
    HOME = auto()
    LOCAL = auto()
    SOCIAL = auto()
    GLOBAL = auto()


class ClientError(Exception):
    pass


class _UserDictBase(TypedDict):
    id: str
    username: str


class UserDict(_UserDictBase, total=False):
    # Incomplete, Misskey sends a lot more than this but it's all we render.
    name: Optional[str]
    host: Optional[str]


class _NoteDictBase(TypedDict):
    id: str
    user: UserDict
    createdAt: str


class NoteDict(_NoteDictBase, total=False):
    # Incomplete, see https://misskey-hub.net/docs/api/ for the rest.
    text: Optional[str]
    renoteId: Optional[str]
    renote: Optional["NoteDict"]
    replyId: Optional[str]
    reactions: Dict[str, int]
    repliesCount: int
    renoteCount: int


class EmojiDict(TypedDict):
    name: str
    url: str


class MetaDict(TypedDict, total=False):
    name: Optional[str]
    mediaProxy: Optional[str]
    emojis: List[EmojiDict]


class Client:
    TIMEOUT: float = 10.0
    TIMELINE_LIMIT: int = 30

    ENDPOINTS: Dict[Timeline, str] = {
        Timeline.HOME: "/api/notes/timeline",
        Timeline.LOCAL: "/api/notes/local-timeline",
        Timeline.SOCIAL: "/api/notes/hybrid-timeline",
        Timeline.GLOBAL: "/api/notes/global-timeline",
    }

    def __init__(self, server: str, token: str) -> None:
        if not server.startswith("https://") and "//" not in server:
            # Assume they meant to add this.
            server = "https://" + server

        self.server = server.rstrip("/")
        self.__token = token
        self.__session = requests.Session()

    @property
    def hostname(self) -> str:
        return self.server.split("//", 1)[-1].split("/", 1)[0]

    def __url(self, endpoint: str) -> str:
        return self.server + endpoint

    def __post(self, endpoint: str, **params: Any) -> Any:
        payload = {"i": self.__token, **{k: v for k, v in params.items() if v is not None}}
        logger.debug("POST %s", endpoint)

        try:
            resp = self.__session.post(self.__url(endpoint), json=payload, timeout=self.TIMEOUT)
        except requests.RequestException as e:
            raise ClientError(str(e)) from e

        if resp.status_code not in {200, 204}:
            raise ClientError(f"API request failed: {resp.status_code} {resp.reason}".rstrip())

        if resp.status_code == 204 or not resp.content:
            return None

        try:
            return resp.json()
        except ValueError as e:
            raise ClientError(f"Invalid response from {endpoint}") from e

    def fetchAccountInfo(self) -> UserDict:
        return cast(UserDict, self.__post("/api/i"))

    def fetchTimeline(
        self,
        which: Timeline,
        *,
        limit: int = TIMELINE_LIMIT,
        until: Optional[str] = None,
    ) -> List[NoteDict]:
        if which not in self.ENDPOINTS:
            raise ClientError("Unknown timeline to fetch!")

        notes = self.__post(self.ENDPOINTS[which], limit=limit, untilId=until)
        return cast(List[NoteDict], notes or [])

    def fetchNote(self, noteId: str) -> NoteDict:
        return cast(NoteDict, self.__post("/api/notes/show", noteId=noteId))

    def fetchChildren(self, noteId: str, *, limit: int = TIMELINE_LIMIT) -> List[NoteDict]:
        return cast(List[NoteDict], self.__post("/api/notes/children", noteId=noteId, limit=limit) or [])

    def createNote(self, text: str, *, replyId: Optional[str] = None) -> None:
        self.__post("/api/notes/create", text=text, replyId=replyId)

    def createRenote(self, noteId: str) -> None:
        self.__post("/api/notes/create", renoteId=noteId)

    def createReaction(self, noteId: str, reaction: str) -> None:
        self.__post("/api/notes/reactions/create", noteId=noteId, reaction=reaction)

    def fetchMeta(self) -> MetaDict:
        meta = cast(MetaDict, self.__post("/api/meta", detail=True) or {})

        # Newer servers dropped the emoji list out of the metadata, so ask for it separately.
        try:
            emojis = self.__post("/api/emojis")
        except ClientError:
            if "emojis" not in meta:
                raise
        else:
            if isinstance(emojis, dict) and "emojis" in emojis:
                meta["emojis"] = cast(List[EmojiDict], emojis["emojis"])

        return meta

    def proxyUrl(self, meta: MetaDict) -> str:
        proxy = meta.get("mediaProxy")
        return (proxy or self.__url("/proxy")).rstrip("/")

    def fetchProxiedImage(self, proxy: str, url: str, *, purpose: str = "emoji") -> bytes:
        logger.debug("GET %s for %s", proxy, url)

        try:
            resp = self.__session.get(
                proxy + "/image.webp",
                params={"url": url, "type": purpose},
                timeout=self.TIMEOUT,
            )
        except requests.RequestException as e:
            raise ClientError(str(e)) from e

        if resp.status_code != 200:
            raise ClientError(f"Image request failed: {resp.status_code} {resp.reason}".rstrip())

        return resp.content
