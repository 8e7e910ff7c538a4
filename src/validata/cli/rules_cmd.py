"""Rule set commands: validate files and list available functions."""

from pathlib import Path

import click

from validata.errors import RuleError
from validata.loader import RuleSet, validate_ruleset_file
from validata.registry import FilterRegistry, ValidatorRegistry
from validata.rules import CONTEXT_VALIDATORS


def _unknown_functions(ruleset: RuleSet) -> list[str]:
    problems = []
    for rule in ruleset.rules:
        if not (rule.is_context_check or ValidatorRegistry.is_registered(rule.validator)):
            problems.append(f"unknown validator '{rule.validator}' for {', '.join(rule.fields)}")
    for filter_rule in ruleset.filter_rules:
        for name, _ in filter_rule.filters:
            if not FilterRegistry.is_registered(name):
                problems.append(f"unknown filter '{name}' for {', '.join(filter_rule.fields)}")
    return problems


@click.group()
def rules():
    """Rule set commands."""
    pass


@rules.command()
@click.argument("rules_path", metavar="RULES", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def validate(rules_path: Path):
    """Validate a RULES YAML file against the rule set schema."""
    issues = validate_ruleset_file(rules_path)
    for issue in issues:
        colour = "red" if issue.severity == "error" else "yellow"
        click.echo(click.style(str(issue), fg=colour))

    errors = [i for i in issues if i.severity == "error"]
    if errors:
        click.echo(click.style(f"\n{len(errors)} schema error(s) found", fg="red", bold=True))
        raise SystemExit(1)

    # ── Semantic validation ────────────────────────────────────────────────
    try:
        ruleset = RuleSet.from_yaml(rules_path)
    except RuleError as e:
        click.echo(click.style(f"\nSemantic validation failed: {e}", fg="red"), err=True)
        raise SystemExit(1)

    problems = _unknown_functions(ruleset)
    for problem in problems:
        click.echo(click.style(problem, fg="red"))
    if problems:
        raise SystemExit(1)

    click.echo(
        f"Loaded {len(ruleset.rules)} rules, {len(ruleset.filter_rules)} filter rules, "
        f"{len(ruleset.scenes)} scenes"
    )
    click.echo(click.style("\nRule set is valid.", fg="green", bold=True))


@click.command("list")
@click.argument("kind", type=click.Choice(["validators", "filters"]), default="validators")
def list_functions(kind: str):
    """List registered validators or filters."""
    if kind == "validators":
        entries = ValidatorRegistry.provenances()
        for name in CONTEXT_VALIDATORS:
            entries.setdefault(name, None)
    else:
        entries = FilterRegistry.provenances()

    for name in sorted(entries):
        provenance = entries[name]
        click.echo(f"{name:<24} {provenance.value if provenance else 'context'}")
