"""
Tests for Codex Schemas - Typed codex document and handshake models.
"""

import pytest
from pydantic import ValidationError

from codex_runtime.schemas.codex import (
    CitePolicy,
    Codex,
    ContextDecay,
    Mode,
    ReflexProfileName,
    Stakes,
    TelemetrySettings,
    normalize_mode,
)
from codex_runtime.schemas.handshake import Handshake, HandshakeOptions


class TestModeNormalization:
    """Tests for flag-style mode names."""

    def test_strips_flag_prefix(self):
        """Test that "--careful" becomes "careful"."""
        assert normalize_mode("--careful") == "careful"

    def test_bare_name_unchanged(self):
        """Test that bare names and non-strings pass through."""
        assert normalize_mode("direct") == "direct"
        assert normalize_mode(None) is None

    def test_flag_style_document_parses(self, codex):
        """Test that the bundled flag-style codex is normalized everywhere."""
        assert set(codex.modes) == {Mode.DIRECT, Mode.CAREFUL, Mode.RECAP}
        assert codex.handshake_defaults.mode == Mode.CAREFUL
        assert codex.context_decay.on_expire == Mode.RECAP
        assert Mode.RECAP in codex.handshake_required_fields.mode


class TestCodexModel:
    """Tests for the Codex document model."""

    def test_reference_codex_values(self, codex):
        """Test key values of the reference codex."""
        assert codex.codex_version == "0.9.0"
        assert codex.stakes_entry("high").min_confidence_floor == 0.75
        assert codex.mode_policy("--careful").min_confidence_default == 0.70
        assert codex.reflex_thresholds["hallucination"].block_if_over == 0.80

    def test_omission_scan_accepts_bool_and_auto(self, codex):
        """Test the bool-or-"auto" omission scan domain."""
        assert codex.stakes_entry(Stakes.LOW).omission_scan_default == "auto"
        assert codex.stakes_entry(Stakes.HIGH).omission_scan_default is True

    def test_omission_scan_rejects_other_strings(self, minimal_codex_document):
        """Test that omission_scan_default rejects strings other than "auto"."""
        minimal_codex_document["stakes_policy"]["low"]["omission_scan_default"] = "yes"

        with pytest.raises(ValidationError):
            Codex.model_validate(minimal_codex_document)

    def test_unknown_mode_key_fails(self, minimal_codex_document):
        """Test that a mode outside the enumeration fails parsing."""
        minimal_codex_document["modes"]["turbo"] = {"min_confidence_default": 0.5}

        with pytest.raises(ValidationError):
            Codex.model_validate(minimal_codex_document)

    def test_floor_out_of_range_fails(self, minimal_codex_document):
        """Test that confidence floors are bounded to [0, 1]."""
        minimal_codex_document["stakes_policy"]["high"]["min_confidence_floor"] = 1.5

        with pytest.raises(ValidationError):
            Codex.model_validate(minimal_codex_document)

    def test_incomplete_document_still_parses(self, minimal_codex_document):
        """Test that sections reported by the validator are optional to the parser."""
        del minimal_codex_document["failure_semantics"]
        del minimal_codex_document["telemetry"]
        minimal_codex_document["modes"].pop("recap")

        codex = Codex.model_validate(minimal_codex_document)

        assert codex.failure_semantics is None
        assert codex.telemetry is None
        assert Mode.RECAP not in codex.modes

    def test_codex_is_frozen(self, codex):
        """Test that a parsed codex cannot be mutated."""
        with pytest.raises(ValidationError):
            codex.codex_version = "1.0.0"

    def test_optional_sections_default(self, minimal_codex):
        """Test defaults for optional sections."""
        assert minimal_codex.citation_hooks is None
        assert minimal_codex.compat_matrix is None
        assert minimal_codex.reflex_profiles[ReflexProfileName.DEFAULT].cooldowns.global_ms == 0


class TestContextDecayModel:
    """Tests for ContextDecay limits."""

    def test_limits_from_max_fields(self):
        """Test that limits fall back to the max_* fields."""
        decay = ContextDecay(max_turns_without_recap=12, max_tokens_since_recap=8000, on_expire="recap")

        assert decay.turn_limit == 12
        assert decay.token_limit == 8000

    def test_mirror_fields_take_precedence(self):
        """Test that force_recap_after_* override the max_* fields."""
        decay = ContextDecay(
            max_turns_without_recap=12,
            max_tokens_since_recap=8000,
            on_expire="--recap",
            force_recap_after_turns=6,
            force_recap_after_tokens=0,
        )

        assert decay.turn_limit == 6
        assert decay.token_limit == 0
        assert decay.on_expire == Mode.RECAP


class TestTelemetrySettings:
    """Tests for the telemetry gate."""

    @pytest.mark.parametrize("enabled,emit_events,expected", [
        (None, True, True),
        (True, True, True),
        (False, True, False),
        (True, False, False),
        (None, False, False),
    ])
    def test_active(self, enabled, emit_events, expected):
        """Test that both flags gate emission."""
        settings = TelemetrySettings(enabled=enabled, emit_events=emit_events)
        assert settings.active is expected


class TestHandshakeModel:
    """Tests for Handshake and HandshakeOptions."""

    def test_header_is_json_shaped(self):
        """Test that the header serializes enums to plain strings."""
        handshake = Handshake(
            mode=Mode.CAREFUL,
            stakes=Stakes.HIGH,
            min_confidence=0.75,
            cite_policy=CitePolicy.FORCE,
            omission_scan="auto",
            reflex_profile=ReflexProfileName.STRICT,
            codex_version="0.9.0",
        )

        assert handshake.header() == {
            "mode": "careful",
            "stakes": "high",
            "min_confidence": 0.75,
            "cite_policy": "force",
            "omission_scan": "auto",
            "reflex_profile": "strict",
            "codex_version": "0.9.0",
        }

    def test_min_confidence_bounded(self):
        """Test that handshake min_confidence stays within [0, 1]."""
        with pytest.raises(ValidationError):
            Handshake(
                mode="careful",
                stakes="low",
                min_confidence=1.2,
                cite_policy="auto",
                omission_scan=True,
                reflex_profile="default",
                codex_version="0.9.0",
            )

    def test_options_normalize_flag_mode(self):
        """Test that overrides accept flag-style modes."""
        assert HandshakeOptions(mode="--direct").mode == Mode.DIRECT

    def test_options_reject_unknown_mode(self):
        """Test that overrides reject unknown modes."""
        with pytest.raises(ValidationError):
            HandshakeOptions(mode="turbo")
