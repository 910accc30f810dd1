import argparse
import logging
import sys
from pathlib import Path


def _add_backend_to_path() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    backend_root = repo_root / "backend"
    if str(backend_root) not in sys.path:
        sys.path.insert(0, str(backend_root))


def _configure_logging(verbose: bool) -> None:
    from docx_plch.config import get_config  # type: ignore

    cfg = get_config().logging
    level = logging.DEBUG if verbose else getattr(logging, cfg.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=cfg.log_format)


def _cmd_list(args: argparse.Namespace) -> int:
    from docx_plch.pipeline import PipelineExecutor, placeholders_to_json  # type: ignore

    tokens = PipelineExecutor().extract_placeholders(Path(args.docx).read_bytes())
    print(placeholders_to_json(tokens, indent=2))
    return 0


def _cmd_positions(args: argparse.Namespace) -> int:
    from docx_plch.pipeline import PipelineExecutor, positions_to_json  # type: ignore

    tokens = PipelineExecutor().extract_placeholders(
        Path(args.docx).read_bytes(), unique=not args.all
    )
    print(positions_to_json(tokens, indent=2))
    return 0


def _cmd_fill(args: argparse.Namespace) -> int:
    from docx_plch.pipeline import PipelineExecutor, values_from_json  # type: ignore

    values = values_from_json(Path(args.values).read_bytes()) if args.values else {}
    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(PipelineExecutor().substitute(Path(args.docx).read_bytes(), values))
    print(f"已写出: {out_path}")
    return 0


def _cmd_orientation(args: argparse.Namespace) -> int:
    from docx_plch.pipeline import PipelineExecutor  # type: ignore

    landscape = PipelineExecutor().detect_orientation(Path(args.docx).read_bytes())
    print("landscape" if landscape else "portrait")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        description="docx 占位符工具：列出/定位/替换 {{...}} 占位符，检测页面方向。"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="输出调试日志")
    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="列出去重后的占位符")
    p_list.add_argument("docx", help="docx文件路径")
    p_list.set_defaults(func=_cmd_list)

    p_pos = sub.add_parser("positions", help="输出占位符位置记录（JSON）")
    p_pos.add_argument("docx", help="docx文件路径")
    p_pos.add_argument("--all", action="store_true", help="输出每一处出现（默认去重）")
    p_pos.set_defaults(func=_cmd_positions)

    p_fill = sub.add_parser("fill", help="替换占位符并写出新文件")
    p_fill.add_argument("docx", help="docx文件路径")
    p_fill.add_argument("--values", default="", help="替换表JSON文件（对象：占位符 → 值）")
    p_fill.add_argument("--out", required=True, help="输出docx路径")
    p_fill.set_defaults(func=_cmd_fill)

    p_orient = sub.add_parser("orientation", help="检测页面方向")
    p_orient.add_argument("docx", help="docx文件路径")
    p_orient.set_defaults(func=_cmd_orientation)

    args = parser.parse_args()

    _add_backend_to_path()
    _configure_logging(args.verbose)

    from docx_plch.interfaces import DocxPlchError  # type: ignore

    try:
        return args.func(args)
    except (DocxPlchError, OSError) as exc:
        print(f"ERROR {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
