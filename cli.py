#!/usr/bin/env python3
"""
Command-line interface for the responsive breakpoint merge engine.
"""

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from responsive_merge.evaluation.breakpoint_analysis import analyze_breakpoints
from responsive_merge.exceptions import MergeConfigError, MergeInputError
from responsive_merge.io.tree_loader import ArtifactManager, TreeLoader
from responsive_merge.models import BreakpointConfig, MergeConfig, PassOptions, Variant
from responsive_merge.orchestration import run_merge

# Load environment variables
load_dotenv()


def resolve_paths(args):
    """Return (wide, medium, narrow) paths from --sample-dir or explicit flags."""
    if args.sample_dir:
        files = TreeLoader().find_variant_files(args.sample_dir)
        return files[Variant.WIDE], files[Variant.MEDIUM], files[Variant.NARROW]

    if not (args.wide and args.medium and args.narrow):
        raise ValueError("Provide --sample-dir or all of --wide, --medium and --narrow")
    return Path(args.wide), Path(args.medium), Path(args.narrow)


def build_config(args) -> MergeConfig:
    """Environment defaults overridden by command-line flags."""
    config = MergeConfig.from_env()

    if args.medium_width or args.narrow_width:
        config.breakpoints = BreakpointConfig(
            medium_max_width=args.medium_width or config.breakpoints.medium_max_width,
            narrow_max_width=args.narrow_width or config.breakpoints.narrow_max_width,
            medium_prefix=config.breakpoints.medium_prefix,
            narrow_prefix=config.breakpoints.narrow_prefix,
        )
    if args.similarity is not None:
        config.similarity_threshold = args.similarity
    for name in args.disable or []:
        config.passes[name] = PassOptions(enabled=False)

    return config


def cmd_merge(args):
    """Merge three variant trees into one responsive tree."""
    print("🔀 Merging breakpoint variants...")

    try:
        wide_path, medium_path, narrow_path = resolve_paths(args)
    except (ValueError, FileNotFoundError) as e:
        print(f"❌ Error: {e}")
        return 1

    for label, path in (("Wide", wide_path), ("Medium", medium_path), ("Narrow", narrow_path)):
        if not Path(path).exists():
            print(f"❌ Error: {label} tree not found: {path}")
            return 1

    sample_id = args.sample_id or (Path(args.sample_dir).name if args.sample_dir else Path(wide_path).stem)

    print(f"📁 Sample ID: {sample_id}")
    print(f"🖥️  Wide: {wide_path}")
    print(f"💻 Medium: {medium_path}")
    print(f"📱 Narrow: {narrow_path}")

    loader = TreeLoader()
    wide, medium, narrow = loader.load_variants(wide_path, medium_path, narrow_path)

    is_valid, error_msg = loader.validate_variants(wide, medium, narrow)
    if not is_valid:
        print(f"❌ Tree validation failed: {error_msg}")
        return 1

    print("✅ Trees validated")

    try:
        config = build_config(args)
        result = run_merge(wide, medium, narrow, config=config, sample_id=sample_id)
    except (MergeInputError, MergeConfigError) as e:
        print(f"❌ Merge failed: {e}")
        return 1

    stats = result.stats
    print(f"✅ Merged {stats.elements_merged}/{stats.elements_processed} elements")
    print(f"   🎨 Classes merged: {stats.classes_merged}")
    print(f"   ⚡ Conflicts: {stats.conflicts_resolved} in {stats.elements_with_conflicts} elements")
    print(f"   🔁 Resets applied: {stats.resets_applied}")
    print(f"   ↔️  Scroll containers: {stats.overflow_containers_annotated}")
    print(f"   👁️  Visibility tokens: {stats.visibility_tokens_injected}")
    for variant in ("medium", "narrow"):
        counts = stats.matches[variant]
        print(
            f"   🔗 {variant}: {counts['by_identity']} by identity, "
            f"{counts['by_position']} by position, {counts['unmatched']} unmatched"
        )

    artifact_manager = ArtifactManager(args.output)
    paths = artifact_manager.save_result(sample_id, result)

    print(f"💾 Artifacts saved:")
    print(f"   📄 Merged HTML: {paths['html']}")
    print(f"   🌳 Merged JSON: {paths['json']}")
    print(f"   📊 Report: {paths['report']}")
    print(f"   🎨 CSS: {paths['css']}")

    return 0


def cmd_analyze(args):
    """Assess whether three variant trees can be fused."""
    print("🔍 Analyzing breakpoint variants...")

    try:
        wide_path, medium_path, narrow_path = resolve_paths(args)
    except (ValueError, FileNotFoundError) as e:
        print(f"❌ Error: {e}")
        return 1

    loader = TreeLoader()
    wide, medium, narrow = loader.load_variants(wide_path, medium_path, narrow_path)
    analysis = analyze_breakpoints(wide, medium, narrow)

    print("\n📊 Identity Statistics:")
    for variant, count in analysis.identity_counts.items():
        print(f"   {variant}: {count} unique identities")

    print(f"\n✅ Common identities (present in all 3): {len(analysis.common_identities)}")
    for variant, names in analysis.variant_only.items():
        if names:
            print(f"\n⚠️  Not shared by all variants, in {variant} ({len(names)}):")
            for name in names:
                print(f"     - {name}")

    print("\n📋 Strategy Summary:")
    print(f"   ✅ CSS-only: {len(analysis.css_only)}")
    print(f"   🔄 Component-swap: {len(analysis.component_swap)}")
    for comparison in analysis.component_swap:
        print(f"   📦 {comparison.identity}")
        if not comparison.wide_medium.match:
            print(f"      - wide ≠ medium ({comparison.wide_medium.reason})")
        if not comparison.wide_narrow.match:
            print(f"      - wide ≠ narrow ({comparison.wide_narrow.reason})")
        if not comparison.medium_narrow.match:
            print(f"      - medium ≠ narrow ({comparison.medium_narrow.reason})")

    print("\n🎯 Feasibility:")
    print(f"   Score: {analysis.feasibility_score}% ({analysis.assessment.upper()})")
    print(f"   CSS-only applicable: {analysis.css_only_percentage}% of common identities")

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        report = analysis.model_dump(mode="json")
        report["assessment"] = analysis.assessment
        output_path.write_text(json.dumps(report, indent=2, ensure_ascii=False), encoding="utf-8")
        print(f"\n💾 Analysis saved to: {output_path}")

    return 0


def add_tree_arguments(parser):
    parser.add_argument("--sample-dir", "-d", help="Directory with wide/medium/narrow .json or .html files")
    parser.add_argument("--wide", "-w", help="Path to wide tree")
    parser.add_argument("--medium", "-m", help="Path to medium tree")
    parser.add_argument("--narrow", "-n", help="Path to narrow tree")


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Responsive breakpoint merge of wide, medium and narrow UI trees",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Merge command
    merge_parser = subparsers.add_parser("merge", help="Merge three variant trees")
    add_tree_arguments(merge_parser)
    merge_parser.add_argument("--output", "-o", default="outputs", help="Output directory")
    merge_parser.add_argument("--sample-id", "-s", help="Sample identifier (default: from directory or filename)")
    merge_parser.add_argument("--medium-width", type=int, help="Medium breakpoint max width (px)")
    merge_parser.add_argument("--narrow-width", type=int, help="Narrow breakpoint max width (px)")
    merge_parser.add_argument("--similarity", type=float, help="Positional match similarity threshold (0-1)")
    merge_parser.add_argument("--disable", action="append", help="Disable an optional pass (repeatable)")

    # Analyze command
    analyze_parser = subparsers.add_parser("analyze", help="Assess fusion feasibility")
    add_tree_arguments(analyze_parser)
    analyze_parser.add_argument("--output", "-o", help="Output path for analysis JSON")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    try:
        if args.command == "merge":
            return cmd_merge(args)
        elif args.command == "analyze":
            return cmd_analyze(args)
    except KeyboardInterrupt:
        print("\n\n⚠️  Interrupted by user")
        return 130
    except Exception as e:
        print(f"\n❌ Error: {str(e)}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
