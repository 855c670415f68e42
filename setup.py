from setuptools import setup, find_packages

setup(
    name="nanjil-mep-service",
    version="1.0.0",
    packages=find_packages(include=["nanjil", "nanjil.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "starlette",
        "pydantic>=2.5",
        "pydantic-settings>=2.7",
        "python-multipart",
        "uvicorn[standard]",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "httpx",
        ],
    },
)
