from setuptools import find_packages, setup

setup(
    name="slidescript-backend",
    version="0.1.0",
    package_dir={"": "backend"},
    packages=find_packages(where="backend", exclude=["tests", "tests.*"]),
    py_modules=["app"],
    install_requires=[
        "fastapi>=0.110",
        "uvicorn>=0.29",
        "pydantic>=2.6",
        "python-multipart>=0.0.9",
        "python-dotenv>=1.0",
        "pyyaml>=6.0",
        "lxml>=5.0",
        "python-pptx>=0.6.23",
        "openai>=1.30",
        "google-genai>=1.0",
        "aiohttp>=3.9",
        "openpyxl>=3.1",
        "python-docx>=1.1",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
            "httpx>=0.27",
        ],
    },
    python_requires=">=3.10",
    include_package_data=True,
    description="Backend for narrating PowerPoint presentations (scripts, TTS and speaker notes)",
)
