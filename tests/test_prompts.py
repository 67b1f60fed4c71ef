import json

import pytest

from services.prompts import (
    build_quiz_prompt,
    build_summary_prompt,
    language_name,
    true_false_options,
)


@pytest.mark.parametrize("language,expected", [
    ("id", ["Benar", "Salah"]),
    ("en", ["True", "False"]),
    ("fr", ["True", "False"]),
    ("xx", ["True", "False"]),
])
def test_true_false_options(language, expected):
    assert true_false_options(language) == expected


def test_unknown_language_falls_back_to_english():
    assert language_name("id") == "Indonesian (Bahasa Indonesia)"
    assert language_name("ja") == "Japanese"
    assert language_name("tlh") == "English"


@pytest.mark.parametrize("summary_type,marker", [
    ("concise", "concise summary (2-3 paragraphs)"),
    ("detailed", "comprehensive, detailed summary"),
    ("bullet_points", "structured bullet-point summary"),
    ("abstract", "academic-style abstract (150-250 words)"),
])
def test_summary_prompt_picks_template(summary_type, marker):
    prompt = build_summary_prompt(summary_type, "biology.pdf", "en")
    assert marker in prompt
    assert "'biology.pdf'" in prompt
    assert prompt.endswith("IMPORTANT: Write the entire summary in English. All text must be in English.")


def test_unknown_summary_type_uses_concise_template():
    assert build_summary_prompt("haiku", "a.pdf", "de") == build_summary_prompt("concise", "a.pdf", "de")
    assert "German" in build_summary_prompt("haiku", "a.pdf", "de")


def test_multiple_choice_prompt_rules():
    prompt = build_quiz_prompt(10, "hard", "multiple_choice", "notes.pdf", "en")

    assert "generate exactly 10 multiple-choice questions" in prompt
    assert "complex analysis, synthesis, and critical evaluation" in prompt
    assert "exactly 4 options" in prompt
    assert "correct_answer index must be 0-3" in prompt
    assert "don't always make it option A/0" in prompt
    assert "starting from 1" in prompt
    assert "Write ALL questions, options, and explanations in English" in prompt
    assert "Return the response as JSON" not in prompt


@pytest.mark.parametrize("language,options,other", [
    ("id", "['Benar', 'Salah']", "'True'"),
    ("en", "['True', 'False']", "'Benar'"),
    ("es", "['True', 'False']", "'Benar'"),
])
def test_true_false_prompt_fixes_option_labels(language, options, other):
    prompt = build_quiz_prompt(5, "easy", "true_false", "notes.pdf", language, include_json_example=True)

    assert f"Options must be exactly {options}" in prompt
    assert other not in prompt
    assert "basic concepts and fundamental understanding" in prompt


def test_true_false_json_example_uses_language_labels():
    prompt = build_quiz_prompt(5, "easy", "true_false", "notes.pdf", "id", include_json_example=True)
    example = prompt.split("exact structure:\n", 1)[1].split("\n\nGenerate", 1)[0]

    data = json.loads(example)
    assert data["questions"][0]["options"] == ["Benar", "Salah"]


def test_mixed_prompt_requires_type_tags_and_balance():
    prompt = build_quiz_prompt(8, "medium", "mixed", "notes.pdf", "en", include_json_example=True)

    assert "application of concepts and analytical thinking" in prompt
    assert "Add a 'type' field to each question" in prompt
    assert "Mix roughly equal numbers of both types" in prompt

    example = json.loads(prompt.split("exact structure:\n", 1)[1].split("\n\nGenerate", 1)[0])
    assert [q["type"] for q in example["questions"]] == ["multiple_choice", "true_false"]
    assert example["questions"][1]["options"] == ["True", "False"]


def test_quiz_prompt_is_deterministic():
    args = (7, "medium", "mixed", "notes.pdf", "ko")
    assert build_quiz_prompt(*args) == build_quiz_prompt(*args)
    assert "Korean" in build_quiz_prompt(*args)


def test_language_lookup_ignores_case_and_spacing():
    assert language_name(" JA ") == "Japanese"
    assert true_false_options("ID") == ["Benar", "Salah"]
    assert "Portuguese" not in build_summary_prompt("concise", "a.pdf", "PT-br")
