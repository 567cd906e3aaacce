"""Tests for template and record models."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from skinscores.models import Caller, InputType, ScoreResult, ScoreTemplate
from tests.conftest import braden_template_data


class TestScoreTemplate:
    def test_parses_camel_case(self, braden_template: ScoreTemplate) -> None:
        assert braden_template.interpretation.summary_template == "Braden {{score}}"
        assert braden_template.copy_blocks[0].body_template.startswith("Braden score")
        assert braden_template.inputs[0].type is InputType.SELECT

    def test_accepts_snake_case_names(self) -> None:
        template = ScoreTemplate(
            name="T",
            slug="t",
            category="c",
            version="2",
            description="",
            interpretation={"summary_template": "", "ranges": []},
        )
        assert template.copy_blocks == []
        assert template.document_id == "t-v2"

    def test_required_defaults_to_false(self) -> None:
        data = braden_template_data()
        del data["inputs"][0]["required"]
        assert ScoreTemplate.model_validate(data).inputs[0].required is False

    def test_duplicate_input_ids_rejected(self) -> None:
        data = braden_template_data()
        data["inputs"][1]["id"] = data["inputs"][0]["id"]
        with pytest.raises(ValidationError, match="Duplicate input id"):
            ScoreTemplate.model_validate(data)

    def test_duplicate_option_values_rejected(self) -> None:
        data = braden_template_data()
        options: list[dict[str, Any]] = data["inputs"][0]["options"]
        options[1]["value"] = options[0]["value"]
        with pytest.raises(ValidationError, match="Duplicate option value"):
            ScoreTemplate.model_validate(data)

    def test_unknown_input_type_rejected(self) -> None:
        data = braden_template_data()
        data["inputs"][0]["type"] = "slider"
        with pytest.raises(ValidationError):
            ScoreTemplate.model_validate(data)

    def test_find_option_is_exact(self, braden_template: ScoreTemplate) -> None:
        definition = braden_template.inputs[0]
        assert definition.find_option("3") is not None
        assert definition.find_option(" 3") is None


class TestRecords:
    def test_result_serializes_camel_case(self) -> None:
        result = ScoreResult(id="r1", session_id="s1", user_id="u", template_id="t-v1", score=3)
        dumped = result.model_dump(by_alias=True)
        assert dumped["sessionId"] == "s1"
        assert dumped["interpretationLabel"] is None
        assert dumped["copyBlocks"] == []


class TestCaller:
    def test_admin_role(self) -> None:
        assert Caller(uid="a", role="admin").is_admin
        assert not Caller(uid="a").is_admin
        assert Caller(uid="a", role="superuser", admin_role="superuser").is_admin
