"""
Unit tests for Stage 1: JSON extraction.
"""

import sys

import pytest

from generation_layer.validation.exceptions import UnparseableResponse
from generation_layer.validation.stage1_extract import Stage1Extract, strip_fences


class TestStripFences:
    def test_json_fence(self):
        assert strip_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    
    def test_bare_fence(self):
        assert strip_fences('```\n{"a": 1}\n```') == '{"a": 1}'
    
    def test_no_fence_is_trimmed_only(self):
        assert strip_fences('  {"a": 1}\n') == '{"a": 1}'
    
    def test_markdown_text_keeps_content(self):
        assert strip_fences("```markdown\nDear Hiring Manager,\n```") == "Dear Hiring Manager,"


class TestStage1Extract:
    """Test suite for Stage 1 extraction strategies."""
    
    def setup_method(self):
        self.stage1 = Stage1Extract()
    
    def test_plain_json_object(self):
        result = self.stage1.extract('{"growthRate": 5.2, "topSkills": []}')
        
        assert result == {"growthRate": 5.2, "topSkills": []}
    
    def test_fenced_json_parses_identically_to_unwrapped(self):
        raw = '{"demandLevel": "HIGH", "keyTrends": ["AI"]}'
        
        assert self.stage1.extract(f"```json\n{raw}\n```") == self.stage1.extract(raw)
    
    def test_leading_prose_is_skipped(self):
        result = self.stage1.extract('Here is the analysis you asked for: {"growthRate": 3}')
        
        assert result == {"growthRate": 3}
    
    def test_prose_and_fences_together(self):
        raw = 'Sure! ```json\n{"growthRate": 5.2, "demandLevel": "high"}\n``` Hope this helps.'
        
        result = self.stage1.extract(raw)
        
        assert result == {"growthRate": 5.2, "demandLevel": "high"}
    
    def test_nested_braces_use_last_closing_brace(self):
        raw = 'Result: {"questions": [{"question": "q", "options": ["a"]}]} end'
        
        result = self.stage1.extract(raw)
        
        assert result["questions"][0]["options"] == ["a"]
    
    def test_empty_string_raises_error(self):
        with pytest.raises(UnparseableResponse) as exc_info:
            self.stage1.extract("")
        
        assert "empty or whitespace-only" in str(exc_info.value)
    
    def test_whitespace_only_raises_error(self):
        with pytest.raises(UnparseableResponse):
            self.stage1.extract("   \n\t  ")
    
    def test_no_braces_raises_error(self):
        with pytest.raises(UnparseableResponse) as exc_info:
            self.stage1.extract("I cannot help with that request.")
        
        assert "no JSON object" in exc_info.value.message
        assert exc_info.value.details["content_snippet"].startswith("I cannot")
    
    def test_broken_json_between_braces_raises_error(self):
        with pytest.raises(UnparseableResponse) as exc_info:
            self.stage1.extract('prefix {"growthRate": 5.2,, } suffix')
        
        assert "parse_error" in exc_info.value.details
    
    def test_top_level_array_is_rejected(self):
        with pytest.raises(UnparseableResponse):
            self.stage1.extract("[1, 2, 3]")
    
    def test_snippet_is_truncated(self):
        with pytest.raises(UnparseableResponse) as exc_info:
            self.stage1.extract("x" * 2000)
        
        assert len(exc_info.value.details["content_snippet"]) == 500
    
    @pytest.mark.skipif(
        not hasattr(sys, "get_int_max_str_digits"),
        reason="interpreter has no integer digit limit",
    )
    def test_integer_over_digit_limit_raises_error(self):
        with pytest.raises(UnparseableResponse) as exc_info:
            self.stage1.extract('{"growthRate": ' + "1" * 5000 + "}")
        
        assert "parse_error" in exc_info.value.details
    
    def test_pathologically_nested_json_raises_error(self):
        depth = 100_000
        
        with pytest.raises(UnparseableResponse):
            self.stage1.extract('{"keyTrends": ' + "[" * depth + "]" * depth + "}")
