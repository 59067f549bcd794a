from setuptools import setup, find_packages

setup(
    name="typepace",
    version="0.1.0",
    description="Typing speed tracker with rolling averages and terminal charts",
    author="",
    python_requires=">=3.8",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy>=1.21.0",
        "rich>=12.5.0",
        "pyyaml>=6.0.0",
        "pypubsub>=4.0.3",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "typepace=typepace.main:main",
        ],
    },
)
