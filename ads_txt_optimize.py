#!/usr/bin/env python3
"""
ads_txt_optimize.py
Rewrites an ads.txt in normalized form: invalid lines and duplicates dropped,
variables grouped by type, records grouped by ad system (DIRECT first).

Usage:
  python ads_txt_optimize.py --in ads.txt --out ads.optimized.txt --publisher-domain example.com
"""
import argparse, logging, sys

from ads_txt_validator import optimize_ads_txt, parse_ads_txt_content


def main(argv=None):
    ap = argparse.ArgumentParser()
    ap.add_argument("--in", dest="infile", required=True)
    ap.add_argument("--out", dest="outfile", required=True)
    ap.add_argument("--publisher-domain", help="Adds OWNERDOMAIN=<root domain> when missing")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    with open(args.infile, 'r', encoding='utf-8') as f:
        content = f.read()

    before = parse_ads_txt_content(content)
    optimized = optimize_ads_txt(content, args.publisher_domain)
    after = parse_ads_txt_content(optimized)

    with open(args.outfile, "w", encoding="utf-8") as out:
        out.write(optimized + "\n")

    invalid = sum(1 for e in before if not e.is_valid)
    print(f"Wrote {args.outfile}. {len(after)} entries kept, {invalid} invalid line(s) dropped.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
