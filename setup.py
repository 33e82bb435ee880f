from pathlib import Path
from setuptools import setup, find_packages


def _parse_requirements(path: str) -> list[str]:
    req_path = Path(path)
    if not req_path.exists():
        return []
    lines = req_path.read_text().splitlines()
    return [l.strip() for l in lines if l.strip() and not l.strip().startswith("#")]


setup(
    name="knowledge_graph",
    version="0.1.0",
    description="Force-directed knowledge graph explorer with click selection",
    package_dir={"": "src"},
    packages=find_packages(where="src", include=["knowledge_graph*"]),
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=_parse_requirements("requirements-runtime.txt"),
    extras_require={
        "test": ["pytest>=7.0", "pytest-asyncio>=0.21"],
    },
    entry_points={
        "console_scripts": ["knowledge-graph=knowledge_graph.main:main"],
    },
)
