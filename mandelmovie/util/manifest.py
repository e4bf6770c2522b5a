import json
import os
import platform
import sys
import time
from dataclasses import asdict, dataclass
from importlib import metadata
from typing import Any, Dict, Optional

from mpmath import libmp

STACK = ["numpy", "Pillow", "mpmath", "tqdm", "natsort", "opencv-python", "gmpy2"]

@dataclass(frozen=True)
class RunManifest:
    started_utc: str
    config: Dict[str, Any]
    python: Dict[str, Any]
    packages: Dict[str, str]
    git: Dict[str, Any]
    system: Dict[str, Any]
    movie: Dict[str, Any]

def _utc_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())

def _installed_version(name: str) -> Optional[str]:
    try:
        return metadata.version(name)
    except metadata.PackageNotFoundError:
        return None

def build_manifest(*, config: Dict[str, Any], movie_info: Dict[str, Any], git_commit: Optional[str]) -> RunManifest:
    packages = {}
    for name in STACK:
        version = _installed_version(name)
        if version:
            packages[name] = version

    return RunManifest(
        started_utc=_utc_iso(),
        config=config,
        python={"version": sys.version, "executable": sys.executable, "mpmath_backend": libmp.BACKEND},
        packages=packages,
        git={"commit": git_commit},
        system={"platform": platform.platform(), "machine": platform.machine(), "cpus": os.cpu_count()},
        movie=movie_info,
    )

def write_manifest(path: str, manifest: RunManifest) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(asdict(manifest), f, indent=2, sort_keys=True, default=str)
