"""
Unit tests for Blockchain Ledger module.

Tests:
- Amount canonicalization and payload codec
- Block creation and hashing
- Genesis block
- Append
- Chain validation
"""

import dataclasses
import hashlib
import json
from decimal import Decimal

import pytest

from hashledger.blockchain.codec import (
    Payload, canonical_amount, make_payload, check_payload, serialize
)
from hashledger.blockchain.ledger import (
    Block, ChainStatus, ValidationReport,
    compute_hash, hash_input, create_genesis, new_chain, last_block,
    append, check_block, is_canonical_timestamp, verify, validate,
    chain_to_json, chain_from_json, format_chain,
    GENESIS_PREV_HASH, GENESIS_TIMESTAMP, GENESIS_PAYLOAD, HASH_HEX_LENGTH
)
from hashledger.exceptions import ChainIntegrityError, EmptyChainError, InvalidPayload


T1 = 1700000000000
T2 = 1700000001500


def build_chain(transfers):
    chain = new_chain()
    for i, (sender, receiver, amount) in enumerate(transfers):
        chain = append(chain, make_payload(sender, receiver, amount), T1 + i)
    return chain


class TestAmountCanonicalization:
    """Tests for canonical_amount."""

    @pytest.mark.parametrize("raw, expected", [
        ("0025", "25"),
        ("01.50", "1.5"),
        ("1.5", "1.5"),
        ("3.000", "3"),
        (".5", "0.5"),
        ("7.", "7"),
        ("0.001", "0.001"),
        ("  42  ", "42"),
        ("100", "100"),
        ("12345678901234567890.123456789012345678901", "12345678901234567890.123456789012345678901"),
    ])
    def test_text_amounts(self, raw, expected):
        """Equivalent numeric text normalizes to one canonical form."""
        assert canonical_amount(raw) == expected

    def test_int_amount(self):
        """Integers are accepted."""
        assert canonical_amount(25) == "25"

    def test_decimal_amount(self):
        """Decimals are rendered without exponent."""
        assert canonical_amount(Decimal("1.50")) == "1.5"
        assert canonical_amount(Decimal("1E+3")) == "1000"

    @pytest.mark.parametrize("raw", [
        "", "   ", ".", "abc", "1,5", "1.2.3", "-1", "+1", "1e3",
        "NaN", "inf", "0", "0000", "0.000", "١٢",
    ])
    def test_invalid_text_rejected(self, raw):
        """Non-decimal, signed, exponent and zero amounts are rejected."""
        with pytest.raises(InvalidPayload):
            canonical_amount(raw)

    @pytest.mark.parametrize("raw", [
        0, -5, True, 1.5, None, Decimal("NaN"), Decimal("Infinity"), Decimal("-2"),
    ])
    def test_invalid_values_rejected(self, raw):
        """Zero, negatives, bools, floats and non-finite decimals are rejected."""
        with pytest.raises(InvalidPayload):
            canonical_amount(raw)


class TestPayloadCodec:
    """Tests for Payload construction and serialization."""

    def test_make_payload(self):
        """make_payload strips parties and canonicalizes the amount."""
        payload = make_payload(" alice ", "bob", "0025")
        assert payload == Payload("alice", "bob", "25")

    def test_empty_sender_rejected(self):
        """Empty sender should be rejected."""
        with pytest.raises(InvalidPayload):
            make_payload("", "bob", "1")
        with pytest.raises(InvalidPayload):
            make_payload("   ", "bob", "1")

    def test_empty_receiver_rejected(self):
        """Empty receiver should be rejected."""
        with pytest.raises(InvalidPayload):
            make_payload("alice", "", "1")

    def test_invalid_amount_not_coerced(self):
        """An unparseable amount raises instead of becoming zero."""
        with pytest.raises(InvalidPayload):
            make_payload("alice", "bob", "ten")

    def test_payload_immutable(self):
        """Payload should be immutable (frozen)."""
        payload = make_payload("alice", "bob", "1")
        with pytest.raises(dataclasses.FrozenInstanceError):
            payload.amount = "2"

    def test_serialize_format(self):
        """Serialization is compact JSON in fixed field order."""
        payload = make_payload("alice", "bob", "2.5")
        assert serialize(payload) == '{"sender":"alice","receiver":"bob","amount":"2.5"}'

    def test_serialize_equivalent_amounts(self):
        """'01.50' and '1.5' serialize identically."""
        assert serialize(make_payload("a", "b", "01.50")) == serialize(make_payload("a", "b", "1.5"))

    def test_serialize_is_structurally_delimited(self):
        """Shifting text between fields changes the serialization."""
        p1 = make_payload("ab", "c", "1")
        p2 = make_payload("a", "bc", "1")
        assert serialize(p1) != serialize(p2)

    def test_serialize_escapes_quotes(self):
        """Quotes inside fields cannot forge another field."""
        tricky = make_payload('a","receiver":"x', "bob", "1")
        assert json.loads(serialize(tricky))["sender"] == 'a","receiver":"x'

    def test_value_is_decimal(self):
        """Payload.value returns the exact Decimal."""
        assert make_payload("a", "b", "0.1").value == Decimal("0.1")

    def test_dict_roundtrip(self):
        """to_dict/from_dict preserve the payload."""
        payload = make_payload("alice", "bob", "2.5")
        assert Payload.from_dict(payload.to_dict()) == payload

    def test_check_payload_accepts_canonical(self):
        """A payload from make_payload passes check_payload."""
        check_payload(make_payload("alice", "bob", "2.5"))

    def test_check_payload_rejects_non_canonical(self):
        """A hand-built payload with non-canonical amount is rejected."""
        with pytest.raises(InvalidPayload):
            check_payload(Payload("alice", "bob", "0025"))

    def test_check_payload_rejects_genesis_payload(self):
        """The genesis payload is not eligible for appending."""
        with pytest.raises(InvalidPayload):
            check_payload(GENESIS_PAYLOAD)

    @pytest.mark.parametrize("sender,receiver", [(" ", "bob"), ("alice", "  "), ("\t", "\n")])
    def test_check_payload_rejects_blank_parties(self, sender, receiver):
        """Whitespace-only parties fail check_payload like they fail make_payload."""
        with pytest.raises(InvalidPayload):
            check_payload(Payload(sender, receiver, "1"))

    def test_from_dict_requires_strings(self):
        """Payload.from_dict rejects non-string fields."""
        with pytest.raises(TypeError):
            Payload.from_dict({"sender": "alice", "receiver": "bob", "amount": 25})


class TestHashing:
    """Tests for compute_hash."""

    def test_hash_input_order(self):
        """Hash input is index, timestamp, payload, previous hash."""
        payload = make_payload("alice", "bob", "2.5")
        assert hash_input(1, "42", payload, "abc") == '142{"sender":"alice","receiver":"bob","amount":"2.5"}abc'

    def test_matches_reference_sha224(self):
        """compute_hash is SHA-224 of the concatenated input."""
        payload = make_payload("alice", "bob", "2.5")
        expected = hashlib.sha224(hash_input(1, "42", payload, "abc").encode()).hexdigest()
        assert compute_hash(1, "42", payload, "abc") == expected

    def test_hex_length(self):
        """Digest is 56 lowercase hex characters."""
        digest = compute_hash(0, "0", GENESIS_PAYLOAD, "0")
        assert len(digest) == HASH_HEX_LENGTH
        assert digest == digest.lower()
        int(digest, 16)

    def test_deterministic(self):
        """Identical inputs always produce the identical digest."""
        payload = make_payload("alice", "bob", "2.5")
        assert compute_hash(3, "99", payload, "ff") == compute_hash(3, "99", payload, "ff")

    def test_each_field_changes_digest(self):
        """Changing any one input changes the digest."""
        payload = make_payload("alice", "bob", "2.5")
        base = compute_hash(1, "1000", payload, "abc")
        assert compute_hash(2, "1000", payload, "abc") != base
        assert compute_hash(1, "1001", payload, "abc") != base
        assert compute_hash(1, "1000", make_payload("alice", "bob", "2.6"), "abc") != base
        assert compute_hash(1, "1000", make_payload("alice", "carol", "2.5"), "abc") != base
        assert compute_hash(1, "1000", make_payload("dave", "bob", "2.5"), "abc") != base
        assert compute_hash(1, "1000", payload, "abd") != base

    def test_backends_agree(self):
        """Builtin and cryptography backends give the same block hash."""
        payload = make_payload("alice", "bob", "2.5")
        assert (compute_hash(1, "5", payload, "0", backend="builtin")
                == compute_hash(1, "5", payload, "0", backend="cryptography"))


class TestGenesis:
    """Tests for the genesis block."""

    def test_genesis_fields(self):
        """Genesis has index 0, fixed timestamp and sentinel previous hash."""
        genesis = create_genesis()
        assert genesis.index == 0
        assert genesis.timestamp == GENESIS_TIMESTAMP
        assert genesis.previous_hash == GENESIS_PREV_HASH == "0"
        assert genesis.payload == GENESIS_PAYLOAD
        assert genesis.is_genesis

    def test_genesis_hash(self):
        """Genesis hash is computed like any other block's."""
        genesis = create_genesis()
        assert genesis.hash == compute_hash(0, "0", GENESIS_PAYLOAD, "0")

    def test_genesis_idempotent(self):
        """Calling create_genesis twice yields identical blocks."""
        assert create_genesis() == create_genesis()

    def test_new_chain(self):
        """A new chain holds only the genesis block."""
        chain = new_chain()
        assert chain == (create_genesis(),)


class TestBlock:
    """Tests for Block structure."""

    def test_block_immutable(self):
        """Block should be immutable (frozen)."""
        block = create_genesis()
        with pytest.raises(dataclasses.FrozenInstanceError):
            block.index = 1

    def test_block_dict_roundtrip(self):
        """to_dict/from_dict preserve the block."""
        chain = build_chain([("alice", "bob", "2.5")])
        block = chain[1]
        data = block.to_dict()
        assert data["payload"] == {"sender": "alice", "receiver": "bob", "amount": "2.5"}
        assert Block.from_dict(data) == block

    @pytest.mark.parametrize("field,value", [
        ("index", "1"),
        ("index", True),
        ("index", 1.0),
        ("timestamp", T1),
        ("previous_hash", None),
        ("hash", 7),
    ])
    def test_from_dict_wrong_types_rejected(self, field, value):
        """from_dict rejects fields whose JSON type append() never produces."""
        data = build_chain([("alice", "bob", "2.5")])[1].to_dict()
        data[field] = value
        with pytest.raises(TypeError):
            Block.from_dict(data)

    @pytest.mark.parametrize("timestamp", ["", "007", "-5", "1e3", "١٢"])
    def test_from_dict_non_canonical_timestamp_rejected(self, timestamp):
        """from_dict only accepts the millisecond text append() stores."""
        data = build_chain([("alice", "bob", "2.5")])[1].to_dict()
        data["timestamp"] = timestamp
        with pytest.raises(ValueError):
            Block.from_dict(data)

    @pytest.mark.parametrize("timestamp,expected", [
        ("0", True), ("5", True), (str(T1), True),
        ("007", False), ("", False), ("+5", False), (5, False),
    ])
    def test_is_canonical_timestamp(self, timestamp, expected):
        """Canonical timestamps are ASCII digits without leading zeros."""
        assert is_canonical_timestamp(timestamp) is expected

    def test_check_block_accepts_appended_block(self):
        """A block produced by append passes check_block at its position."""
        chain = build_chain([("alice", "bob", "2.5"), ("bob", "carol", "1")])
        check_block(chain[1], 1)
        check_block(chain[2], 2)

    def test_check_block_rejects_wrong_position(self):
        """The stored index must equal the block's position."""
        block = build_chain([("alice", "bob", "2.5")])[1]
        with pytest.raises(ValueError):
            check_block(block, 2)
        with pytest.raises(ValueError):
            check_block(dataclasses.replace(block, index=True), 1)

    def test_check_block_rejects_non_canonical_payload(self):
        """A stored amount that needs normalization is rejected."""
        block = build_chain([("alice", "bob", "25")])[1]
        with pytest.raises(InvalidPayload):
            check_block(dataclasses.replace(block, payload=Payload("alice", "bob", "0025")), 1)
        with pytest.raises(InvalidPayload):
            check_block(dataclasses.replace(block, payload=Payload("alice", "bob", "abc")), 1)

    def test_check_block_rejects_bad_timestamp(self):
        """A stored timestamp must be canonical millisecond text."""
        block = build_chain([("alice", "bob", "2.5")])[1]
        with pytest.raises(ValueError):
            check_block(dataclasses.replace(block, timestamp=5), 1)

    def test_block_str(self):
        """String form names the block and its payload."""
        text = str(build_chain([("alice", "bob", "2.5")])[1])
        assert "Block #1" in text
        assert "alice -> bob: 2.5" in text


class TestAppend:
    """Tests for append."""

    def test_append_links_to_genesis(self):
        """Appended block links to the previous block's hash."""
        genesis = create_genesis()
        payload = make_payload("alice", "bob", "2.5")
        chain = append((genesis,), payload, T1)

        assert len(chain) == 2
        block = chain[1]
        assert block.index == 1
        assert block.timestamp == str(T1)
        assert block.payload == payload
        assert block.previous_hash == genesis.hash
        assert block.hash == compute_hash(1, str(T1), payload, genesis.hash)

    def test_append_does_not_mutate_input(self):
        """The input chain is left untouched."""
        chain = new_chain()
        extended = append(chain, make_payload("a", "b", "1"), T1)
        assert len(chain) == 1
        assert extended[0] is chain[0]

    def test_append_accepts_list(self):
        """Any sequence is accepted and a tuple is returned."""
        chain = append(list(new_chain()), make_payload("a", "b", "1"), T1)
        assert isinstance(chain, tuple)

    def test_indices_match_positions(self):
        """chain[i].index == i for every block."""
        chain = build_chain([("a", "b", str(n)) for n in range(1, 6)])
        assert [block.index for block in chain] == list(range(6))

    def test_blocks_linked(self):
        """Every block links to its predecessor."""
        chain = build_chain([("a", "b", "1"), ("b", "c", "2"), ("c", "a", "3")])
        for prev, curr in zip(chain, chain[1:]):
            assert curr.previous_hash == prev.hash

    def test_timestamp_string(self):
        """Digit-string timestamps are accepted."""
        chain = append(new_chain(), make_payload("a", "b", "1"), str(T2))
        assert chain[1].timestamp == str(T2)

    @pytest.mark.parametrize("timestamp", [-1, "12:00", "", "1.5", 1.5, True, None])
    def test_bad_timestamp_rejected(self, timestamp):
        """Timestamps must be non-negative integer milliseconds."""
        with pytest.raises(ValueError):
            append(new_chain(), make_payload("a", "b", "1"), timestamp)

    def test_empty_chain_rejected(self):
        """Appending to an empty chain fails with EmptyChainError."""
        with pytest.raises(EmptyChainError):
            append((), make_payload("alice", "bob", "1"), T1)

    def test_invalid_payload_rejected(self):
        """append fails fast on a payload that bypassed make_payload."""
        with pytest.raises(InvalidPayload):
            append(new_chain(), Payload("alice", "bob", "abc"), T1)
        with pytest.raises(InvalidPayload):
            append(new_chain(), Payload("", "bob", "1"), T1)

    def test_last_block(self):
        """last_block returns the tail, and fails on empty chains."""
        chain = build_chain([("a", "b", "1")])
        assert last_block(chain) is chain[-1]
        with pytest.raises(EmptyChainError):
            last_block([])


class TestChainValidation:
    """Tests for verify/validate on untampered chains."""

    def test_genesis_only_valid(self):
        """A chain with only the genesis block is valid."""
        assert validate(new_chain())
        assert verify(new_chain()) == ValidationReport(ChainStatus.VALID)

    def test_two_block_scenario(self):
        """Genesis + alice->bob 2.5 validates and recomputes."""
        genesis = create_genesis()
        payload = make_payload("alice", "bob", "2.5")
        chain = append((genesis,), payload, T1)

        assert validate(chain)
        assert compute_hash(1, str(T1), payload, genesis.hash) == chain[1].hash

    def test_long_chain_valid(self):
        """Chains built only via append are valid."""
        chain = build_chain([("user%d" % n, "user%d" % (n + 1), "%d.5" % n) for n in range(20)])
        assert validate(chain)

    def test_empty_chain_invalid(self):
        """An empty chain is reported, not accepted."""
        report = verify(())
        assert report.status is ChainStatus.EMPTY
        assert not validate(())

    def test_report_truthiness(self):
        """ValidationReport is truthy only when valid."""
        assert ValidationReport(ChainStatus.VALID)
        assert not ValidationReport(ChainStatus.BROKEN_LINK, 3)
        assert str(ValidationReport(ChainStatus.BROKEN_LINK, 3)) == "broken_link at block #3"

    def test_validate_with_cryptography_backend(self):
        """A chain built with one backend validates with the other."""
        chain = build_chain([("a", "b", "1"), ("b", "c", "2")])
        assert validate(chain, backend="cryptography")


class TestChainSerialization:
    """Tests for JSON export/import and display."""

    def test_json_roundtrip(self):
        """chain_to_json/chain_from_json preserve the chain."""
        chain = build_chain([("alice", "bob", "2.5"), ("bob", "carol", "1")])
        loaded = chain_from_json(chain_to_json(chain))
        assert loaded == chain
        assert validate(loaded)

    @pytest.mark.parametrize("text", [
        "not json",
        "[]",
        "5",
        '{"blocks": []}',
        '{"chain": 5}',
        '{"chain": [5]}',
        '{"chain": [{"index": 0}]}',
    ])
    def test_malformed_json_rejected(self, text):
        """Malformed documents raise ChainIntegrityError, not raw parser errors."""
        with pytest.raises(ChainIntegrityError):
            chain_from_json(text)

    def test_missing_payload_rejected(self):
        """A block without its payload is malformed."""
        data = json.loads(chain_to_json(build_chain([("alice", "bob", "2.5")])))
        del data["chain"][1]["payload"]
        with pytest.raises(ChainIntegrityError):
            chain_from_json(json.dumps(data))

    def test_format_chain(self):
        """format_chain lists every block."""
        chain = build_chain([("alice", "bob", "2.5")])
        text = format_chain(chain)
        assert "length=2" in text
        assert "Block #0" in text and "Block #1" in text
