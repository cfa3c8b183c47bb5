from pathlib import Path

import pytest

from humsafar.rules.loader import DEFAULT_RULES_PATH, load_rules, parse_rules
from humsafar.rules.models import Rules


def test_project_rules_load(rules: Rules) -> None:
    assert rules.project.slug == "humsafar"
    assert rules.visibility.featured_limit == 5
    assert rules.visibility.placeholder_image == "/placeholder.jpg"
    assert len(rules.visibility.tracked_fields) == 14
    assert rules.packages.catalog["premium"].views == 55
    assert rules.addons.catalog["boost_profile"].duration_days == 30
    assert set(rules.quota.blocking_payment_statuses) == {"pending", "under_review", "rejected"}


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_rules(tmp_path / "nope.yaml")


def test_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "rules.yaml"
    path.write_text("project: [unclosed")
    with pytest.raises(ValueError, match="Invalid YAML"):
        load_rules(path)


def test_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "rules.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ValueError, match="mapping"):
        load_rules(path)


def test_fenced_block_is_extracted(tmp_path: Path) -> None:
    source = DEFAULT_RULES_PATH.read_text()
    path = tmp_path / "rules.md"
    path.write_text(f"# Rules\n\nSome prose.\n\n```yaml\n{source}\n```\n")
    assert load_rules(path).project.slug == "humsafar"


def test_weights_must_sum_to_100(rules: Rules) -> None:
    data = rules.model_dump()
    data["visibility"]["photo_weight"] = 30
    with pytest.raises(ValueError, match="validation failed"):
        parse_rules(data)


def test_tracked_fields_required(rules: Rules) -> None:
    data = rules.model_dump()
    data["visibility"]["tracked_fields"] = []
    with pytest.raises(ValueError):
        parse_rules(data)
