"""Unit tests for the command tokenizer."""

from shadowgit.gateway.tokenizer import strip_control_chars, tokenize


class TestTokenize:
    """Quote-aware splitting."""

    def test_double_quoted_argument(self):
        """Test that a double-quoted span becomes one token."""
        assert tokenize('log -5 "release v1.0"') == ["log", "-5", "release v1.0"]

    def test_single_quoted_argument(self):
        """Test that single quotes group words too."""
        assert tokenize("log --grep='fix bug'") == ["log", "--grep=fix bug"]

    def test_splits_on_any_whitespace(self):
        """Test tabs, newlines and runs of spaces all separate tokens."""
        assert tokenize("log\t--oneline \n  -3") == ["log", "--oneline", "-3"]

    def test_leading_and_trailing_whitespace(self):
        assert tokenize("   status   ") == ["status"]

    def test_escaped_quote_inside_same_quote(self):
        """Test backslash + active quote yields a literal quote."""
        assert tokenize(r'log --grep="say \"hi\""') == ["log", '--grep=say "hi"']

    def test_backslash_before_other_char_is_literal(self):
        assert tokenize(r'show "a\b"') == ["show", r"a\b"]

    def test_other_quote_is_literal_inside_quotes(self):
        """Test quotes do not nest."""
        assert tokenize("""log --grep="it's done" """) == ["log", "--grep=it's done"]

    def test_adjacent_spans_join_one_token(self):
        """Test that a closed quote keeps building the same token."""
        assert tokenize('a"b c"d') == ["ab cd"]

    def test_unterminated_quote_runs_to_end(self):
        assert tokenize('log "no end') == ["log", "no end"]

    def test_empty_quotes_produce_no_token(self):
        assert tokenize('log ""') == ["log"]

    def test_empty_input(self):
        """Test that empty input yields an empty vector, not an error."""
        assert tokenize("") == []
        assert tokenize("   \t ") == []

    def test_no_shell_interpretation(self):
        """Test that operators, globs and variables stay literal."""
        assert tokenize("log $HOME *.py | cat; rm") == ["log", "$HOME", "*.py", "|", "cat;", "rm"]


class TestControlCharacters:
    """Control characters are stripped before splitting."""

    def test_embedded_low_bytes_removed(self):
        """Test NUL and other low bytes vanish before tokenizing."""
        assert tokenize("log\x00\x01 \x1b--oneline") == ["log", "--oneline"]

    def test_control_bytes_inside_option(self):
        assert tokenize("log --one\x00line") == ["log", "--oneline"]

    def test_del_removed(self):
        assert strip_control_chars("st\x7fatus") == "status"

    def test_whitespace_controls_kept(self):
        """Test TAB/LF/CR survive stripping so they still split."""
        assert strip_control_chars("a\tb\nc\rd") == "a\tb\nc\rd"

    def test_stripping_cannot_hide_dangerous_option(self):
        """Test control chars inside a blocked option still reassemble it."""
        assert tokenize("log --e\x00xec=evil") == ["log", "--exec=evil"]
