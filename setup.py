from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="contextpatch",
    version="0.1.0",
    description="Apply AI-authored unified diffs by context matching instead of line numbers",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "click>=8.1",
        "mcp>=1.2,<2",
        "pydantic>=2.0",
        "pygments>=2.17",
        "pyperclip==1.9.0",
        "rich>=13.0",
        "structlog>=24.1",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    license="MIT",
    entry_points={
        "console_scripts": [
            "contextpatch=contextpatch.main:main",
            "contextpatch-mcp=contextpatch.mcp_server:main",
        ],
    },
)
