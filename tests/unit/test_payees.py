"""
Unit tests for payee parsing and tagging
"""
import pytest
from pydantic import ValidationError

from royalty_engine.core.payees import (
    PendingPayee,
    ResolvedPayee,
    looks_like_address,
    parse_payee,
    payee_from_dict,
    payee_to_dict
)

STACKS_ADDRESS = "SP2J6ZY48GV1EZ5V2V5RB9MP66SW86PYKKNRV9EJ7"
HEX_ADDRESS = "0x" + "ab12" * 16


@pytest.mark.unit
class TestParsePayee:

    def test_hex_address_is_resolved(self):
        assert parse_payee(HEX_ADDRESS) == ResolvedPayee(identity=HEX_ADDRESS)

    def test_stacks_address_is_resolved(self):
        assert parse_payee(STACKS_ADDRESS) == ResolvedPayee(identity=STACKS_ADDRESS)

    def test_human_name_becomes_pending(self):
        payee = parse_payee("  Jane Doe ")
        assert payee == PendingPayee(name="Jane Doe")
        assert payee.is_pending

    def test_blank_input_is_empty_slot(self):
        assert parse_payee(None) is None
        assert parse_payee("") is None
        assert parse_payee("   ") is None

    def test_legacy_prefix(self):
        assert parse_payee("pending:Jane Doe") == PendingPayee(name="Jane Doe")
        assert parse_payee("pending:   ") is None

    def test_tagged_dict(self):
        assert parse_payee({"kind": "resolved", "identity": HEX_ADDRESS}) == ResolvedPayee(identity=HEX_ADDRESS)
        assert parse_payee({"kind": "pending", "name": "Jane"}) == PendingPayee(name="Jane")

    def test_malformed_hex_is_a_name(self):
        assert parse_payee("0xZZZ") == PendingPayee(name="0xZZZ")
        assert not looks_like_address("0xZZZ")


@pytest.mark.unit
class TestPayeeIdentity:

    def test_pending_names_match_case_insensitively(self):
        assert PendingPayee(name="Jane Doe").key == PendingPayee(name="JANE DOE").key
        assert PendingPayee(name="Jane Doe").matches_pending(" jane doe ")

    def test_identity_and_name_never_collide(self):
        resolved = ResolvedPayee(identity="Jane Doe")
        pending = PendingPayee(name="Jane Doe")
        assert resolved.key != pending.key
        assert not resolved.matches_pending("Jane Doe")

    def test_blank_pending_name_rejected(self):
        with pytest.raises(ValidationError):
            PendingPayee(name="   ")

    def test_storage_is_tagged(self):
        assert payee_to_dict(PendingPayee(name="Jane")) == {"kind": "pending", "name": "Jane"}
        assert payee_to_dict(None) is None
        assert payee_from_dict({"kind": "resolved", "identity": "0xabc"}) == ResolvedPayee(identity="0xabc")
