from setuptools import setup, find_packages

setup(
    name="sonoflow",
    version="0.1.0",
    description="Live clinical dictation with streaming transcription and rule-based medical enhancement",
    author="",
    python_requires=">=3.9",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "google-cloud-speech>=2.16.0",
        "google-auth>=2.10.0",
        "google-api-core>=2.10.0",
        "rich>=12.5.0",
        "click>=8.1.0",
        "pydantic>=2.0",
        "pyyaml>=6.0.0",
        "pypubsub>=4.0.3",
        "aiohttp>=3.9.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
            "pytest-aiohttp>=1.0.4",
            "numpy>=1.21.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "sonoflow=sonoflow.main:main",
        ],
    },
)
