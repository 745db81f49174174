import setuptools

try:
    with open("README.md", "r", encoding="utf-8") as fh:
        long_description = fh.read()
except FileNotFoundError:
    long_description = "Client library for the Beanstalk HTTP+XML API"

setuptools.setup(
    name="beanstalk-api",
    version="0.5.0",
    description="Client library for the Beanstalk HTTP+XML API",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=setuptools.find_packages(where="src", include=["beanstalk_api", "beanstalk_api.*"]),
    install_requires=[
        "requests",
        "pydantic>=2",
        "python-dotenv",
        "typer",
        "rich",
        "defusedxml",
        'tomli; python_version < "3.11"',
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "beanstalk=beanstalk_api.cli.main:app",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
)
