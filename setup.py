from setuptools import find_packages, setup

dev_requires = [
    "pytest>=7.4.0",
    "pytest-asyncio>=0.21.0",
    "pytest-xdist>=3.3.0",
    "PyYAML>=6.0",
]

setup(
    name="treefmt",
    version="0.1.0",
    description="One CLI to format the code tree",
    packages=find_packages(
        include=[
            "treefmt_common",
            "treefmt_common.*",
            "treefmt_persistence",
            "treefmt_persistence.*",
            "treefmt_engine",
            "treefmt_engine.*",
            "treefmt_cli",
            "treefmt_cli.*",
        ]
    ),
    install_requires=[
        "aiosqlite>=0.19.0,<0.22",
        "click>=8.1.0",
    ],
    extras_require={
        "dev": dev_requires,
        "all": dev_requires + ["build>=1.0.0"],
    },
    entry_points={
        "console_scripts": [
            "treefmt=treefmt_cli.cli:main",
        ],
    },
    python_requires=">=3.11",
)
