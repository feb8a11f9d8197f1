from setuptools import setup, find_packages

setup(
    name="league-rating-engine",
    version="0.1.0",
    description="Elo ratings, calibrated win probabilities and upset detection for NBA/NHL/NCAAM slates",
    author="Ben Rosen",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy>=1.22.4",
        "pandas>=1.5.3",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "rating-engine=rating_engine.main:main",
        ],
    },
)
