"""
Setup script for eliza-quiz-engine.

The ELIZA quiz engine drives adaptive quizzes for the ELIZA learning
platform. It serves three roles:

1. Graded quizzes - one question at a time with immediate feedback
2. Remediation - practice on every missed concept at a chosen difficulty
3. Practice mode - endless ungraded questions on a topic

The 'eliza-quiz' command is the terminal front end.
"""

from setuptools import find_packages, setup

setup(
    name="eliza-quiz-engine",
    version="1.0.0",
    description="Adaptive quiz and remediation engine for the ELIZA learning platform",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="ELIZA",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["config"],
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # HTTP
        "httpx>=0.25.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "eliza-quiz=eliza_quiz.cli.quiz_cli:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning quiz remediation adaptive cli education",
)
