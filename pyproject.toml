[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "azuredns"
version = "1.0.0"
description = "Manage Azure DNS zone records: list, append, set and delete A, AAAA, CAA, CNAME, MX, NS, SRV, TXT, PTR and SOA records."
requires-python = ">=3.10"
keywords = ["dns", "azure", "azure-dns", "dns-records", "record-sets"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: Name Service (DNS)",
]
dependencies = [
    "requests>=2.28",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[project.scripts]
azuredns-demo = "azuredns.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["azuredns"]

[tool.hatch.build.targets.sdist]
include = ["azuredns", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
