"""Unit tests for language detection and the capability table."""

from detector.languages import (
    LanguageTag,
    capabilities_for,
    detect_language,
    is_supported_file,
)


def test_detect_language_by_extension():
    """Each known extension maps to its language tag."""
    assert detect_language("src/app.js") == LanguageTag.JAVASCRIPT
    assert detect_language("lib/esm.mjs") == LanguageTag.JAVASCRIPT
    assert detect_language("lib/common.cjs") == LanguageTag.JAVASCRIPT
    assert detect_language("tool.py") == LanguageTag.PYTHON
    assert detect_language("scripts/deploy.sh") == LanguageTag.SHELL
    assert detect_language("run.bash") == LanguageTag.SHELL
    assert detect_language("app/models/user.rb") == LanguageTag.RUBY
    assert detect_language("Jenkinsfile.groovy") == LanguageTag.GROOVY
    assert detect_language("build.gradle") == LanguageTag.GROOVY


def test_detect_language_is_case_insensitive():
    assert detect_language("APP.JS") == LanguageTag.JAVASCRIPT
    assert detect_language("Setup.Py") == LanguageTag.PYTHON


def test_unknown_extensions_are_unsupported():
    """Anything outside the extension table is unsupported, including no extension."""
    assert detect_language("README.md") == LanguageTag.UNSUPPORTED
    assert detect_language("Makefile") == LanguageTag.UNSUPPORTED
    assert detect_language("src/main.c") == LanguageTag.UNSUPPORTED
    assert not is_supported_file("README.md")
    assert is_supported_file("src/app.js")


def test_windows_separators():
    assert detect_language("src\\lib\\util.rb") == LanguageTag.RUBY


def test_only_javascript_has_a_tree_grammar():
    """JavaScript gets the syntax analyzer; the others rely on line heuristics."""
    js = capabilities_for(LanguageTag.JAVASCRIPT)
    assert js.has_tree_grammar
    assert js.structural_patterns
    assert not js.line_heuristics

    for tag in (LanguageTag.PYTHON, LanguageTag.SHELL, LanguageTag.RUBY, LanguageTag.GROOVY):
        caps = capabilities_for(tag)
        assert not caps.has_tree_grammar
        assert caps.structural_patterns
        assert caps.line_heuristics
        assert caps.supported

    assert not capabilities_for(LanguageTag.UNSUPPORTED).supported


def test_display_names():
    assert LanguageTag.JAVASCRIPT.display_name == "JavaScript"
    assert str(LanguageTag.PYTHON) == "python"
