"""
Command-Line Interface

CLI for listing presets, generating structures and crossbreeding grammars.

Exit codes: 0 on success, 1 on usage errors, 2 on preset or grammar errors.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional, Tuple

from arbor.core.grammar import Grammar

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_GRAMMAR = 2


class _ArgumentParser(argparse.ArgumentParser):
    """argparse with usage errors mapped to exit code 1."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


class UsageError(Exception):
    pass


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="arbor",
        description="Arbor - procedural branch structure generation",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Presets command
    pre_parser = subparsers.add_parser("presets", help="List available presets")
    pre_parser.add_argument(
        "--describe", "-d",
        action="store_true",
        help="Print the full summary of each preset",
    )

    # Generate command
    gen_parser = subparsers.add_parser("generate", help="Generate a structure and export it")
    source = gen_parser.add_mutually_exclusive_group()
    source.add_argument(
        "--preset", "-p",
        type=str,
        default=None,
        help="Preset name (default: first preset)",
    )
    source.add_argument(
        "--backend", "-b",
        type=str,
        default=None,
        choices=["lsystem", "random_tree"],
        help="Generation backend (random_tree needs no preset)",
    )
    gen_parser.add_argument(
        "--seed", "-s",
        type=int,
        default=None,
        help="Random seed (default: drawn and reported)",
    )
    gen_parser.add_argument(
        "--iterations", "-n",
        type=int,
        default=None,
        help="Override the preset's iteration count",
    )
    gen_parser.add_argument(
        "--output", "-o",
        type=str,
        default="./output",
        help="Output directory (default: ./output)",
    )
    gen_parser.add_argument(
        "--mesh",
        type=str,
        default=None,
        choices=["stl", "obj", "ply"],
        help="Also export a cylinder mesh in this format",
    )

    # Hybridize command
    hyb_parser = subparsers.add_parser(
        "hybridize",
        help="Crossbreed two presets (or two random ones) into a new preset",
    )
    hyb_parser.add_argument(
        "parents",
        nargs="*",
        help="Two parent preset names; omit both to pick at random",
    )
    hyb_parser.add_argument(
        "--alpha", "-a",
        type=float,
        default=None,
        help="Blend factor in [0, 1] toward the second parent (default: 0.5); "
             "needs two parents",
    )
    hyb_parser.add_argument(
        "--seed", "-s",
        type=int,
        default=None,
        help="Random seed for the crossbreed",
    )
    hyb_parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Write the offspring preset JSON here (default: stdout)",
    )

    for p in [pre_parser, gen_parser, hyb_parser]:
        p.add_argument(
            "--file", "-f",
            type=str,
            default=None,
            help="Preset JSON file (default: built-in library)",
        )

    return parser


def _load_pool(path: Optional[str]) -> List[Tuple[str, Grammar]]:
    if path is None:
        from grammarspec.library import builtin_presets
        return builtin_presets()
    from grammarspec.presets import load_presets
    return load_presets(path)


def _pick(pool: List[Tuple[str, Grammar]], name: str) -> Grammar:
    from grammarspec.presets import PresetLoadError
    for preset_name, grammar in pool:
        if preset_name == name:
            return grammar
    raise PresetLoadError(f"unknown preset '{name}' (available: {', '.join(n for n, _ in pool)})")


def run_presets(args) -> int:
    """Run the presets command."""
    from arbor.api import describe_grammar

    for name, grammar in _load_pool(args.file):
        if args.describe:
            print(describe_grammar(grammar))
            print()
        else:
            print(name)
    return EXIT_OK


def run_generate(args) -> int:
    """Run the generate command."""
    from arbor.api import generate_structure, export_all, describe_grammar
    from arbor.backends import LSystemConfig
    from arbor_policies import OutputPolicy

    output_policy = OutputPolicy(output_dir=args.output, mesh_format=args.mesh)

    if args.backend == "random_tree":
        ignored = [flag for flag, value in (("--iterations", args.iterations), ("--file", args.file))
                   if value is not None]
        if ignored:
            raise UsageError(f"{', '.join(ignored)} cannot be used with --backend random_tree")
        source = "random_tree"
        config = None
    else:
        pool = _load_pool(args.file)
        if not pool:
            raise UsageError("no presets available")
        grammar = _pick(pool, args.preset) if args.preset else pool[0][1]
        logging.getLogger(__name__).info("\n" + describe_grammar(grammar))
        source = grammar
        config = LSystemConfig(iterations=args.iterations)
        output_policy.run_name = grammar.name.replace(" ", "_")

    structure, report = generate_structure(source, seed=args.seed, config=config)
    paths = export_all(structure, report, output_policy=output_policy)

    print(f"Generated {len(structure.segments)} segments "
          f"({len(structure.index.nodes)} index nodes), seed {structure.seed}")
    for name, path in paths.items():
        print(f"  {name}: {path}")
    for warning in report.warnings:
        print(f"  warning: {warning}")
    return EXIT_OK


def run_hybridize(args) -> int:
    """Run the hybridize command."""
    from arbor.ops.hybridize import crossbreed, random_hybrid, DEFAULT_CROSSBREED_SEED
    from grammarspec.presets import grammar_to_preset, save_presets

    pool = _load_pool(args.file)
    if len(args.parents) == 2:
        a = _pick(pool, args.parents[0])
        b = _pick(pool, args.parents[1])
        seed = DEFAULT_CROSSBREED_SEED if args.seed is None else args.seed
        alpha = 0.5 if args.alpha is None else args.alpha
        child = crossbreed(a, b, alpha=alpha, seed=seed)
    elif not args.parents:
        if args.alpha is not None:
            raise UsageError("--alpha needs two parent names; random parents draw their own blend")
        child = random_hybrid(pool, seed=args.seed)
    else:
        raise UsageError("hybridize takes two parent names or none")

    if args.output:
        path = save_presets([child], args.output)
        print(f"Wrote '{child.name}' to {path}")
    else:
        print(json.dumps({"presets": [grammar_to_preset(child)]}, indent=2))
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    from grammarspec.expr import ExpressionError
    from grammarspec.presets import PresetLoadError
    from grammarspec.syntax import GrammarSyntaxError
    from arbor.ops.hybridize import HybridizationError

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_USAGE

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    commands = {
        "presets": run_presets,
        "generate": run_generate,
        "hybridize": run_hybridize,
    }
    try:
        return commands[args.command](args)
    except UsageError as e:
        print(f"arbor: error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except (PresetLoadError, GrammarSyntaxError, HybridizationError, ExpressionError) as e:
        print(f"arbor: {e}", file=sys.stderr)
        return EXIT_GRAMMAR


if __name__ == "__main__":
    sys.exit(main())
