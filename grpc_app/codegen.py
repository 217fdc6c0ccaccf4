"""Generate Python stubs from `protos/` into `generated/` with grpcio-tools.

Generated modules are build artifacts: never edit them by hand, regenerate with
`python scripts/gen_protos.py` after changing a .proto file.
"""
from __future__ import annotations

import re
from importlib import resources
from pathlib import Path

from core.logging_config import get_logger


logger = get_logger(__name__)

PACKAGE_ROOT = Path(__file__).resolve().parent
PROTO_ROOT = PACKAGE_ROOT / "protos"
GENERATED_ROOT = PACKAGE_ROOT / "generated"
GENERATED_PACKAGE = "grpc_app.generated"


def _proto_files() -> list[Path]:
    return sorted(PROTO_ROOT.rglob("*.proto"))


def _is_stale(proto: Path) -> bool:
    rel = proto.relative_to(PROTO_ROOT).with_suffix("")
    outputs = [
        GENERATED_ROOT / rel.parent / f"{rel.name}_pb2.py",
        GENERATED_ROOT / rel.parent / f"{rel.name}_pb2_grpc.py",
    ]
    mtime = proto.stat().st_mtime
    return any(not out.exists() or out.stat().st_mtime < mtime for out in outputs)


def _ensure_packages(path: Path) -> None:
    # Every directory between generated/ and the module must be importable
    current = path
    while True:
        init = current / "__init__.py"
        if not init.exists():
            init.write_text("")
        if current == GENERATED_ROOT:
            break
        current = current.parent


def _fix_imports(path: Path) -> None:
    """protoc emits `from staff.v1 import staff_pb2`; make those absolute under grpc_app.generated."""
    top_levels = {p.relative_to(PROTO_ROOT).parts[0] for p in _proto_files()}
    source = path.read_text()
    for top in top_levels:
        source = re.sub(
            rf"^from {re.escape(top)}(\.[\w.]+)? import",
            lambda m: f"from {GENERATED_PACKAGE}.{top}{m.group(1) or ''} import",
            source,
            flags=re.MULTILINE,
        )
    path.write_text(source)


def generate(force: bool = False) -> list[Path]:
    """Compile every .proto under protos/; returns the protos that were (re)generated."""
    from grpc_tools import protoc

    well_known = str(resources.files("grpc_tools") / "_proto")
    generated: list[Path] = []
    GENERATED_ROOT.mkdir(parents=True, exist_ok=True)

    for proto in _proto_files():
        if not force and not _is_stale(proto):
            continue
        rel = proto.relative_to(PROTO_ROOT)
        args = [
            "grpc_tools.protoc",
            f"-I{PROTO_ROOT}",
            f"-I{well_known}",
            f"--python_out={GENERATED_ROOT}",
            f"--pyi_out={GENERATED_ROOT}",
            f"--grpc_python_out={GENERATED_ROOT}",
            str(proto),
        ]
        code = protoc.main(args)
        if code != 0:
            raise RuntimeError(f"protoc failed for {rel} (exit code {code})")

        out_dir = GENERATED_ROOT / rel.parent
        _ensure_packages(out_dir)
        for module in out_dir.glob(f"{proto.stem}_pb2*.py*"):
            _fix_imports(module)
        logger.info("proto_generated", proto=str(rel))
        generated.append(proto)

    return generated
