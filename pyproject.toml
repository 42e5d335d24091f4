[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "medit"
version = "0.1.0"
description = "Core pieces of a small Emacs-style text editor: buffers, cursor motion, screen bookkeeping, a Blowfish cipher and a stack-based extension language"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "editor",
    "emacs",
    "blowfish",
    "stack language",
    "interpreter",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Editors",
    "Topic :: Security :: Cryptography",
    "Topic :: Software Development :: Interpreters",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
mel = "medit.mel:main"

[tool.hatch.build.targets.wheel]
packages = ["medit"]

[tool.pytest.ini_options]
addopts = "-ra"
