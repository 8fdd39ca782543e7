"""
PDF页数统计（pypdf，适用于渲染后的表单文档计页）。
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path


def _add_backend_to_path() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    backend_root = repo_root / "backend"
    if str(backend_root) not in sys.path:
        sys.path.insert(0, str(backend_root))


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--pdf", required=True)
    args = ap.parse_args()

    _add_backend_to_path()
    from formdoc.doc_gen import count_pdf_pages  # type: ignore

    n = count_pdf_pages(Path(args.pdf).read_bytes())
    print(n)


if __name__ == "__main__":
    main()
