"""Setup configuration for ims-assistant package."""

from setuptools import setup, find_packages

setup(
    name="ims-assistant",
    version="0.1.0",
    description="Inventory and sales chat assistant with LangGraph and durable checkpoints",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.0.0",
        "python-dotenv>=1.0.0",
        "langgraph>=0.2.0",
        "openai>=1.0.0",
        "psycopg2-binary>=2.9.0",
        "click>=8.0.0",
        "rich>=13.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.1.0",
            "pytest-mock>=3.11.0",
            "ruff>=0.1.0",
            "mypy>=1.5.0",
            "black>=23.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "ims-assistant=ims_assistant.cli.app:main",
        ],
    },
)
