"""
Decision-Maker Leads - CLI Runner

Usage:
  python -m dml.run \
    --input companies.txt \
    --config config/example.yaml \
    --out ./out

Dry run (validate only):
  python -m dml.run --input companies.txt --out ./out --dry-run

Exit codes:
  0 - success
  1 - config error (file missing, invalid YAML or values)
  2 - input error (input or existing-leads file missing/unreadable)
  3 - processing error (no leads, export failure)
"""
from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import List

from leads.config import ConfigError, load_settings
from leads.ops_logger import OpsLogger
from leads.pipeline.enrich import PhoneEmailEnricher
from leads.pipeline.export import LeadExporter, LeadExportError, load_existing_leads
from leads.pipeline.gate import LeadCollector
from leads.pipeline.ingest import LeadPipeline
from leads.pipeline.vocab import VOCABULARY_VERSION


def read_input_urls(input_path: Path) -> List[str]:
    urls: List[str] = []
    seen = set()
    for line in input_path.read_text(encoding="utf-8").splitlines():
        s = line.strip()
        if not s or s.startswith("#"):
            continue
        if not (s.startswith("http://") or s.startswith("https://")):
            s = f"https://{s}"
        if s not in seen:
            seen.add(s)
            urls.append(s)
    return urls


def ensure_out_dir(out_dir: Path) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)
    test_file = out_dir / ".write_test"
    test_file.write_text("ok", encoding="utf-8")
    test_file.unlink(missing_ok=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dml.run", description="Decision-maker lead extraction runner")
    parser.add_argument("--input", "-i", required=True, help="Path to company URLs file (one per line)")
    parser.add_argument("--config", "-c", default=None, help="Path to YAML config file (optional)")
    parser.add_argument("--out", "-o", required=True, help="Output directory")
    parser.add_argument("--existing", default=None, help="Previous CSV/JSON export to dedupe against")
    parser.add_argument("--limit", type=int, default=50, help="Stop after this many accepted leads (default 50)")
    parser.add_argument("--format", choices=["csv", "json", "both"], default="both", help="Export format (default: both)")
    parser.add_argument("--no-enrich", action="store_true", help="Skip Apollo/Hunter enrichment even if keys are set")
    parser.add_argument("--dry-run", action="store_true", help="Validate inputs/config and exit")
    parser.add_argument("--ops-log", default=None, help="Path to ops JSONL log file (default: config ops.ops_json or <out>/ops.log)")
    parser.add_argument("--ops-stdout", action="store_true", help="Also mirror ops JSON to stdout")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    input_path = Path(args.input)
    out_dir = Path(args.out)

    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 1

    if not input_path.exists() or not input_path.is_file():
        print(f"Input error: file not found: {input_path}", file=sys.stderr)
        return 2
    try:
        urls = read_input_urls(input_path)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Input error: cannot read {input_path}: {e}", file=sys.stderr)
        return 2

    existing = []
    if args.existing:
        try:
            existing = load_existing_leads(args.existing)
        except LeadExportError as e:
            print(f"Input error: {e}", file=sys.stderr)
            return 2

    try:
        ensure_out_dir(out_dir)
    except OSError as e:
        print(f"Output error: cannot write to {out_dir}: {e}", file=sys.stderr)
        return 3

    enrich = (not args.no_enrich) and bool(
        settings.enrichment.apollo_api_key or settings.enrichment.hunter_api_key
    )

    if args.dry_run:
        print("✅ Dry-run validation passed")
        print(f" - Input file: {input_path}")
        print(f" - Config: {args.config or '(defaults)'}")
        print(f" - Output dir: {out_dir}")
        print(f" - Companies to process: {len(urls)}")
        print(f" - Existing leads: {len(existing)}")
        print(f" - Enrichment: {'on' if enrich else 'off'}")
        return 0

    ops_log_path = Path(args.ops_log or settings.ops.ops_json or (out_dir / "ops.log"))
    ops_logger = OpsLogger(ops_log_path, also_stdout=bool(args.ops_stdout))

    enricher = None
    if enrich:
        enricher = PhoneEmailEnricher(
            apollo_api_key=settings.enrichment.apollo_api_key,
            hunter_api_key=settings.enrichment.hunter_api_key,
            ops_logger=ops_logger,
        )

    pipeline = LeadPipeline(
        settings=settings,
        enricher=enricher,
        collector=LeadCollector(existing),
        ops_logger=ops_logger,
        limit=args.limit,
    )

    print(f"Vocabulary v{VOCABULARY_VERSION}: workers={settings.scraping.max_concurrent}, "
          f"limit={args.limit}, enrichment={'on' if enricher else 'off'}")
    proc_start = time.perf_counter()
    try:
        results = pipeline.run(urls)
    finally:
        pipeline.close()

    leads = pipeline.leads
    failed = sum(1 for r in results if not r.success)
    rejected: dict[str, int] = {}
    for r in results:
        for reason, n in r.rejected.items():
            rejected[reason] = rejected.get(reason, 0) + n

    ops_logger.event(
        "summary",
        companies=len(urls),
        failed_companies=failed,
        pages=sum(len(r.pages) for r in results),
        people=sum(r.people_found for r in results),
        accepted=len(leads),
        rejected=rejected,
        existing=len(existing),
        wall_s=round(max(0.0, time.perf_counter() - proc_start), 2),
    )

    if not leads:
        print("No qualified leads extracted from any company.", file=sys.stderr)
        return 3

    exporter = LeadExporter(output_dir=out_dir)
    try:
        if args.format == "csv":
            exporter.to_csv(leads)
        elif args.format == "json":
            exporter.to_json(leads)
        else:
            exporter.to_both(leads)
    except (OSError, ValueError) as e:
        print(f"Export error: {e}", file=sys.stderr)
        return 3

    stats = exporter.get_export_stats(leads)
    print("🏁 Done.")
    print(f"   Companies: {len(urls)} ({failed} failed)")
    print(f"   Leads: {stats['total_leads']} ({stats['verified']} verified, {stats['with_email']} with email)")
    print(f"   By type: {stats['lead_types']}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
