import argparse
import sys
from pathlib import Path


def _add_backend_to_path() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    backend_root = repo_root / "backend"
    if str(backend_root) not in sys.path:
        sys.path.insert(0, str(backend_root))


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Render form instances from a JSON/YAML snapshot file to PDF."
    )
    parser.add_argument("snapshot", help="快照文件（.json / .yaml）")
    parser.add_argument(
        "--instance",
        type=int,
        action="append",
        default=[],
        help="实例ID（可重复；默认渲染文件中全部实例）",
    )
    parser.add_argument(
        "--out-dir",
        default="output",
        help="PDF输出目录（默认：output）",
    )
    parser.add_argument(
        "--config",
        default="",
        help="可选：运行期配置YAML（默认：config/formdoc_runtime.yaml）",
    )
    parser.add_argument(
        "--html-only",
        action="store_true",
        help="只输出封面/正文HTML，不启动浏览器",
    )
    args = parser.parse_args()

    _add_backend_to_path()
    from formdoc.config import get_config, reload_config, setup_logging  # type: ignore
    from formdoc.doc_gen import DocumentBuilder, PlaywrightBackend  # type: ignore
    from formdoc.loader import SnapshotLoader  # type: ignore
    from formdoc.models import RenderJob  # type: ignore
    from formdoc.pipeline import RenderExecutor  # type: ignore

    config = reload_config(args.config) if args.config else get_config()
    setup_logging(config)

    loader = SnapshotLoader.from_file(args.snapshot)
    instance_ids = args.instance or loader.instance_ids()
    if not instance_ids:
        print("快照中没有表单实例")
        return 1

    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    builder = DocumentBuilder(config=config)

    if args.html_only:
        for instance_id in instance_ids:
            plan = builder.build(loader.load(instance_id))
            (out_dir / f"form-{instance_id}.cover.html").write_text(plan.cover_html, encoding="utf-8")
            (out_dir / f"form-{instance_id}.body.html").write_text(plan.body_html, encoding="utf-8")
            print(f"{instance_id}: groups={len(plan.pages)} headings={plan.heading_numbers}")
        return 0

    failures = 0
    with PlaywrightBackend(config.pdf_backend) as backend:
        executor = RenderExecutor(loader, backend, builder)
        for instance_id in instance_ids:
            job = RenderJob(instance_id=instance_id)
            try:
                pdf = executor.execute(job)
            except Exception as exc:  # noqa: BLE001
                print(f"{instance_id}: ERROR {exc}")
                failures += 1
                continue
            target = out_dir / job.filename
            target.write_bytes(pdf)
            print(f"{instance_id}: pages={job.result.total_pages} -> {target}")

    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
