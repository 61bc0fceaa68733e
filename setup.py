from setuptools import setup


setup(
    name="misskey-vt100",
    version="0.1.0",
    description="VT-100 Misskey Client",
    author="DragonMinded",
    license="Public Domain",
    packages=[
        "misskeyvt",
    ],
    install_requires=[
        req for req in open("requirements.txt").read().split("\n") if len(req) > 0
    ],
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.9",
    entry_points={
        "console_scripts": [
            "misskey-vt100 = misskeyvt.__main__:cli",
        ],
    },
)
