from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from skillmatch import config
from skillmatch.analysis import AnalysisOutcome, AnalysisService, InsufficientInputError
from skillmatch.io.resume_loader import identity_for, load_resume
from skillmatch.llm.extractor import FailoverSkillExtractor
from skillmatch.matching.types import SkillWeights
from skillmatch.models import CachedAnalysis, JobPosting, ResumeIdentity
from skillmatch.profile import AddedSkillsRepository
from skillmatch.skills.extractor import extract_skills, extract_skills_with_confidence, skill_statistics
from skillmatch.store import JsonAnalysisStore, match_score_of, payload_metadata


def _read_description(args: argparse.Namespace) -> str:
    path = getattr(args, "description_file", "")
    if path:
        try:
            return Path(path).read_text(encoding="utf-8")
        except OSError as e:
            print(f"[skillmatch] Cannot read {path}: {e}", file=sys.stderr)
            raise SystemExit(2)
    return getattr(args, "description", "") or ""


def _identity_arg(args: argparse.Namespace) -> Optional[ResumeIdentity]:
    resume = getattr(args, "resume", "")
    if not resume:
        return None
    try:
        return identity_for(Path(resume))
    except OSError:
        print(f"[skillmatch] Resume file not found: {resume}", file=sys.stderr)
        raise SystemExit(2)


def _summary_line(entry: CachedAnalysis) -> str:
    meta = payload_metadata(entry.analysis_data)
    when = entry.saved_at.isoformat(timespec="seconds") if entry.saved_at else "?"
    method = meta.get("analysisMethod") or "unknown"
    return f"{when}  {match_score_of(entry.analysis_data):>3}%  {method:<20}  {entry.url}  ({entry.key})"


def print_human_summary(outcome: AnalysisOutcome) -> None:
    p = outcome.payload
    job = (p.get("context") or {}).get("job") or {}
    meta = p.get("metadata") or {}

    print("\n=== Skill Match ===")
    print(f"Job: {job.get('title', '?')}" + (f" @ {job['company']}" if job.get("company") else ""))
    source = "cache" if outcome.from_cache else f"fresh ({outcome.duration_ms}ms)"
    print(f"Result: {source} | method: {meta.get('analysisMethod', 'unknown')}")
    print(f"\nWeighted match: {p.get('weightedMatchPercentage')}%  [{p.get('matchCategory')}]")
    print(f"  must-have: {p.get('mustHaveMatchPercentage')}%  nice-to-have: {p.get('niceToHaveMatchPercentage')}%")
    print(f"  {p.get('recommendation')}")

    must = p.get("mustHave") or {}
    nice = p.get("niceToHave") or {}
    print(f"\nMatched (must-have): {', '.join(must.get('matched') or []) or '-'}")
    print(f"Missing (must-have): {', '.join(must.get('missing') or []) or '-'}")
    print(f"Matched (nice-to-have): {', '.join(nice.get('matched') or []) or '-'}")
    print(f"Missing (nice-to-have): {', '.join(nice.get('missing') or []) or '-'}")
    extra = p.get("extraSkills") or []
    if extra:
        print(f"Extra skills: {', '.join(extra[:10])}" + (" ..." if len(extra) > 10 else ""))

    insights = (p.get("report") or {}).get("insights") or {}
    for label, key in (("Strengths", "strengths"), ("Improvements", "improvements"), ("Advice", "careerAdvice")):
        items = insights.get(key) or []
        if items:
            print(f"\n{label}:")
            for it in items:
                print(f"  - {it}")


# ----------------------------------------------------------------------
# Subcommands
# ----------------------------------------------------------------------

def _cmd_analyze(args: argparse.Namespace, store: JsonAnalysisStore, added: AddedSkillsRepository) -> None:
    loaded = load_resume(args.resume)
    if loaded.source == "none" and args.resume:
        print(f"[skillmatch] Could not read resume: {args.resume}", file=sys.stderr)

    job = JobPosting(
        url=args.url,
        title=args.title,
        description=_read_description(args),
        company=args.company or None,
    )

    ai = None
    if not args.no_ai and config.ai_configured():
        ai = FailoverSkillExtractor.from_config()

    must_w, nice_w = config.scoring_weights()
    try:
        weights = SkillWeights(must_have=must_w, nice_to_have=nice_w)
    except ValueError as e:
        print(f"[skillmatch] Invalid scoring weights: {e}", file=sys.stderr)
        raise SystemExit(2)

    service = AnalysisService(store, ai_extractor=ai, added_skills=added, weights=weights)
    try:
        outcome = service.analyze(job, loaded.text, loaded.identity, force=args.force)
    except InsufficientInputError as e:
        print(f"[skillmatch] {e}", file=sys.stderr)
        raise SystemExit(2)

    if args.json:
        print(json.dumps(outcome.to_dict(), indent=2))
    else:
        print_human_summary(outcome)


def _cmd_extract(args: argparse.Namespace) -> None:
    try:
        text = Path(args.file).read_text(encoding="utf-8")
    except OSError as e:
        print(f"[skillmatch] Cannot read {args.file}: {e}", file=sys.stderr)
        raise SystemExit(2)
    out: Any
    if args.stats:
        out = skill_statistics(text)
    elif args.confidence:
        out = [sc.to_dict() for sc in extract_skills_with_confidence(text)]
    else:
        out = extract_skills(text)

    if args.json:
        print(json.dumps(out, indent=2))
    elif isinstance(out, list):
        for item in out:
            if isinstance(item, dict):
                print(f"{item['confidence']:.2f}  {item['skill']}  ({item['category'] or '-'})")
            else:
                print(item)
    else:
        print(json.dumps(out, indent=2))


def _cmd_list(args: argparse.Namespace, store: JsonAnalysisStore) -> None:
    entries = store.list_for_job(args.url) if args.url else store.list_all()
    if args.json:
        print(json.dumps([e.to_record() | {"key": e.key} for e in entries], indent=2))
        return
    if not entries:
        print("No saved analyses.")
        return
    for e in entries:
        print(_summary_line(e))


def _cmd_show(args: argparse.Namespace, store: JsonAnalysisStore) -> None:
    description = _read_description(args) or None
    entry = store.load(args.url, _identity_arg(args), description)
    if entry is None:
        print("[skillmatch] No saved analysis for that combination.", file=sys.stderr)
        raise SystemExit(1)
    print(json.dumps(entry.to_record(), indent=2))


def _cmd_delete(args: argparse.Namespace, store: JsonAnalysisStore) -> None:
    if args.all:
        n = store.delete_all_for_job(args.url)
        print(f"Deleted {n} analyses for {args.url}")
        return
    description = _read_description(args) or None
    if store.delete(args.url, _identity_arg(args), description):
        print("Deleted.")
    else:
        print("Nothing to delete.")


def _cmd_add_skill(args: argparse.Namespace, store: JsonAnalysisStore, added: AddedSkillsRepository) -> None:
    try:
        result = added.add(args.skill, job_url=args.url or None, store=store)
    except ValueError as e:
        print(f"[skillmatch] {e}", file=sys.stderr)
        raise SystemExit(2)
    if args.json:
        print(json.dumps(result, indent=2))
    elif result["alreadyExists"]:
        print(f"'{result['skill']}' is already in your added skills ({result['totalSkills']} total).")
    else:
        print(f"Added '{result['skill']}' ({result['totalSkills']} total).")
        if result["cacheCleared"]:
            print(f"Cleared {result['cacheCleared']} cached analyses for {args.url}")


# ----------------------------------------------------------------------
# Entry point
# ----------------------------------------------------------------------

def _add_job_args(p: argparse.ArgumentParser, *, required_description: bool = False) -> None:
    p.add_argument("--url", required=True, help="Job posting URL (cache identity)")
    group = p.add_mutually_exclusive_group(required=required_description)
    group.add_argument("--description", type=str, default="", help="Job description text")
    group.add_argument("--description-file", type=str, default="", help="Path to a file holding the job description")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="skillmatch", description="Resume vs. job skill matching with a local analysis cache")
    parser.add_argument("--data-dir", type=str, default="", help="Override SKILLMATCH_DATA_DIR")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("analyze", help="Analyze a resume against a job posting")
    _add_job_args(p, required_description=True)
    p.add_argument("--title", type=str, default="", help="Job title")
    p.add_argument("--company", type=str, default="", help="Company name")
    p.add_argument("--resume", type=str, required=True, help="Path to resume .txt or .pdf")
    p.add_argument("--force", action="store_true", help="Ignore any cached result and overwrite it")
    p.add_argument("--no-ai", action="store_true", help="Dictionary extraction only, even when an AI key is set")
    p.add_argument("--json", action="store_true", help="Print JSON only (machine-readable)")

    p = sub.add_parser("extract", help="Dictionary skill extraction from a text file")
    p.add_argument("file", help="Path to a text file")
    p.add_argument("--confidence", action="store_true", help="Include confidence scores")
    p.add_argument("--stats", action="store_true", help="Print skill statistics")
    p.add_argument("--json", action="store_true", help="Print JSON only")

    p = sub.add_parser("list", help="List saved analyses, newest first")
    p.add_argument("--url", type=str, default="", help="Only analyses of this job URL")
    p.add_argument("--json", action="store_true", help="Print JSON only")

    p = sub.add_parser("show", help="Print one saved analysis record")
    _add_job_args(p)
    p.add_argument("--resume", type=str, default="", help="Resume file the analysis was made with")

    p = sub.add_parser("delete", help="Delete saved analyses")
    _add_job_args(p)
    p.add_argument("--resume", type=str, default="", help="Resume file the analysis was made with")
    p.add_argument("--all", action="store_true", help="Delete every analysis of this job URL")

    p = sub.add_parser("add-skill", help="Declare a skill the resume does not mention")
    p.add_argument("skill", help="Skill name")
    p.add_argument("--url", type=str, default="", help="Also drop cached analyses of this job URL")
    p.add_argument("--json", action="store_true", help="Print JSON only")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    base_dir = Path(args.data_dir) if args.data_dir else config.data_dir()
    store = JsonAnalysisStore(base_dir)
    added = AddedSkillsRepository(base_dir)

    if args.command == "analyze":
        _cmd_analyze(args, store, added)
    elif args.command == "extract":
        _cmd_extract(args)
    elif args.command == "list":
        _cmd_list(args, store)
    elif args.command == "show":
        _cmd_show(args, store)
    elif args.command == "delete":
        _cmd_delete(args, store)
    elif args.command == "add-skill":
        _cmd_add_skill(args, store, added)


if __name__ == "__main__":
    main()
