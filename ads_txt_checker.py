#!/usr/bin/env python3
"""
ads_txt_checker.py
Parses a publisher's ads.txt and cross-checks every record against the sellers.json
of its advertising system. Outputs a JSON and Markdown report.

Usage:
  python ads_txt_checker.py --publisher-domain example.com --out out
  python ads_txt_checker.py --publisher-domain example.com --file ads.txt --cached live_ads.txt --sellers-dir data/sellers --out out
  python ads_txt_checker.py --publisher-domain example.com --file ads.txt --legacy --config data/checker_config.json

--sellers-dir holds <ad system domain>.json files; without it sellers.json is fetched live.
Exit code 1 when any line is invalid.
"""
import argparse, datetime, json, logging, os, sys, urllib.request

from ads_txt_validator import (
    DefaultMessageProvider, HttpSellersJsonProvider, LegacyAccess, cross_check_ads_txt_records,
    describe_entry, fetch_sellers_json, is_ads_txt_record, load_config, load_sellers_directory,
    parse_ads_txt_content,
)

logger = logging.getLogger("ads_txt_checker")


def fetch_ads_txt(host, path="/ads.txt", timeout=20, user_agent="ads-txt-validator/1.0"):
    last_err = None
    for url in (f"https://{host}{path}", f"http://{host}{path}"):
        try:
            req = urllib.request.Request(url, headers={"User-Agent": user_agent})
            with urllib.request.urlopen(req, timeout=timeout) as resp:
                return url, resp.read().decode('utf-8', errors='replace')
        except OSError as e:
            last_err = str(e)
    logger.error("Could not fetch %s from %s: %s", path, host, last_err)
    return None, None


def read_text(path):
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def build_sellers_access(args, cfg):
    if args.sellers_dir:
        return load_sellers_directory(args.sellers_dir)
    if args.legacy:
        return LegacyAccess(lambda d: fetch_sellers_json(d, timeout=cfg.fetch_timeout, user_agent=cfg.user_agent))
    return HttpSellersJsonProvider(timeout=cfg.fetch_timeout, user_agent=cfg.user_agent,
                                   ttl_seconds=cfg.sellers_cache_ttl)


def build_report(publisher_domain, source, entries, messages, locale):
    entries = sorted(entries, key=lambda e: e.line_number)
    rows = []
    for e in entries:
        row = e.to_dict()
        row["messages"] = [m.to_dict() for m in describe_entry(e, messages, locale)]
        rows.append(row)

    records = [e for e in entries if is_ads_txt_record(e)]
    return {
        "generated_at": datetime.datetime.now(datetime.timezone.utc).isoformat().replace("+00:00", "Z"),
        "publisher_domain": publisher_domain,
        "source": source,
        "total_entries": len(entries),
        "records": len(records),
        "variables": len(entries) - len(records),
        "invalid": sum(1 for e in entries if not e.is_valid),
        "with_warnings": sum(1 for e in records if e.has_warning),
        "entries": rows,
    }


def render_markdown(report):
    md = ["# ads.txt Cross-check Report",
          f"_Generated: {report['generated_at']}_",
          "",
          f"- Publisher: **{report['publisher_domain']}** ({report['source']})",
          f"- Entries: **{report['total_entries']}** ({report['records']} records, {report['variables']} variables)",
          f"- Invalid lines: **{report['invalid']}**",
          f"- Records with warnings: **{report['with_warnings']}**",
          "",
          "| Line | Entry | Status | Findings |",
          "|---:|---|---|---|"]
    for row in report["entries"]:
        if row["is_variable"]:
            entry = f"{row['variable_type']}={row['value']}"
        else:
            entry = f"{row['domain']}, {row['account_id']}, {row['relationship']}"
        if not row["is_valid"]:
            status = "INVALID"
        elif row.get("has_warning"):
            status = row.get("severity", "warning").upper()
        else:
            status = "OK"
        findings = "<br>".join(m["message"] for m in row["messages"]) or "–"
        md.append(f"| {row['line_number']} | `{entry}` | {status} | {findings} |")
    return "\n".join(md) + "\n"


def main(argv=None):
    ap = argparse.ArgumentParser(description="Cross-check ads.txt against sellers.json.")
    ap.add_argument("--publisher-domain", required=True)
    ap.add_argument("--file", help="Local ads.txt to check (default: fetch from the publisher domain)")
    ap.add_argument("--cached", help="Publisher's current ads.txt, for duplicate detection")
    ap.add_argument("--sellers-dir", help="Directory of <domain>.json sellers files")
    ap.add_argument("--legacy", action="store_true", help="Fetch whole sellers.json files without a provider")
    ap.add_argument("--config", default="data/checker_config.json")
    ap.add_argument("--locale", help="Message language (overrides config)")
    ap.add_argument("--out", default="out")
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        cfg = load_config(args.config)
        messages = DefaultMessageProvider(args.locale or cfg.locale, base_url=cfg.help_base_url)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    if args.file:
        source, content = args.file, read_text(args.file)
    else:
        source, content = fetch_ads_txt(args.publisher_domain, timeout=cfg.fetch_timeout, user_agent=cfg.user_agent)
        if content is None:
            print(f"ERROR: could not fetch ads.txt for {args.publisher_domain}", file=sys.stderr)
            return 2
    cached = read_text(args.cached) if args.cached else None

    entries = parse_ads_txt_content(content, args.publisher_domain)
    checked = cross_check_ads_txt_records(args.publisher_domain, entries, cached,
                                          build_sellers_access(args, cfg), max_workers=cfg.max_workers)
    report = build_report(args.publisher_domain, source, checked, messages, args.locale or cfg.locale)

    os.makedirs(args.out, exist_ok=True)
    with open(os.path.join(args.out, "report.json"), "w", encoding="utf-8") as jf:
        json.dump(report, jf, indent=2, ensure_ascii=False)
    with open(os.path.join(args.out, "report.md"), "w", encoding="utf-8") as mf:
        mf.write(render_markdown(report))

    print("Done. Reports written to:", args.out)
    return 1 if report["invalid"] else 0


if __name__ == "__main__":
    sys.exit(main())
