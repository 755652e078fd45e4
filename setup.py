"""Setup configuration for docs-server."""
from setuptools import setup, find_packages

setup(
    name="docs-server",
    version="1.0.0",
    description="Documentation ingestion and search server backed by GitHub",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        "docs_server.indexing": ["routes.json"],
    },
    python_requires=">=3.9",
    install_requires=[
        "fastapi>=0.104.0",
        "uvicorn>=0.24.0",
        "httpx>=0.27.0",
        "pydantic>=2.5.0",
        "pydantic-settings>=2.0.0",
        "python-dotenv>=1.0.0",
        "click>=8.1.0",
        "beautifulsoup4>=4.12.0",
        "lxml>=4.9.0",
        "markdown>=3.5",
        "pygments>=2.16.0",
        "node-semver>=0.9.0",
    ],
    extras_require={
        "dev": ["pytest", "pytest-asyncio", "httpx"],
    },
    entry_points={
        "console_scripts": [
            "docs-server=docs_server.__main__:main",
            "docs-indexer=docs_server.indexing.cli:main",
        ],
    },
)
