[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "chirpy"
version = "0.1.0"
description = "A small microblogging HTTP API: users, login and short chirps with a word filter, stored in SQLite."
requires-python = ">=3.10"
keywords = ["microblog", "http", "api", "flask", "sqlite", "jwt", "bcrypt"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "bcrypt",
    "flask",
    "pyjwt",
    "python-dotenv",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
chirpy = "chirpy.server:main"

[tool.hatch.build.targets.wheel]
packages = ["chirpy"]

[tool.pytest.ini_options]
addopts = "-ra"
