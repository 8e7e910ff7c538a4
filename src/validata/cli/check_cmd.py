"""Check command: run a rule set against a JSON document."""

import json
from pathlib import Path

import click

from validata.api.jsonbody import JSONBodyError, decode_json
from validata.errors import RuleError
from validata.factory import from_map
from validata.loader import RuleSet


def _top_level_fields(ruleset: RuleSet) -> set[str]:
    names = set()
    for rule in [*ruleset.rules, *ruleset.filter_rules]:
        names.update(field.split(".", 1)[0] for field in rule.fields)
    return names


@click.command()
@click.argument("rules_path", metavar="RULES", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("input_file", metavar="INPUT", type=click.File("rb"))
@click.option("--scene", default=None, help="Validate only the fields of this scene.")
@click.option("--stop-on-error", is_flag=True, default=False, help="Stop at the first error.")
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Fail when INPUT has top-level fields no rule mentions.",
)
def check(rules_path: Path, input_file, scene: str | None, stop_on_error: bool, strict: bool):
    """Validate INPUT (a JSON object file, or - for stdin) with the RULES file."""
    try:
        ruleset = RuleSet.from_yaml(rules_path)
        data = decode_json(input_file.read(), model=dict)
    except RuleError as e:
        click.echo(click.style(f"Invalid rules: {e}", fg="red"), err=True)
        raise SystemExit(2)
    except JSONBodyError as e:
        click.echo(click.style(f"Invalid input: {e.detail}", fg="red"), err=True)
        raise SystemExit(2)

    v = ruleset.apply(from_map(data))
    if stop_on_error:
        v.stop_on_error = True

    try:
        v.validate(scene)
    except RuleError as e:
        click.echo(click.style(f"Invalid rules: {e}", fg="red"), err=True)
        raise SystemExit(2)

    if strict:
        known = _top_level_fields(ruleset)
        for name in data:
            if name not in known:
                v.add_error(name, "_strict", f"{name} is not an expected field")
    ok = v.is_ok()

    result = {
        "ok": ok,
        "safe_data": v.safe_data,
        "filtered_data": v.filtered_data,
        "errors": v.errors.to_dict(),
    }
    click.echo(json.dumps(result, indent=2, default=str))
    if not ok:
        raise SystemExit(1)
