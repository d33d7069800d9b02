from __future__ import annotations

import pytest

from glotoken import DENYLISTER_ROLE, PAUSER_ROLE, deploy_glo_dollar, domain_separator_for, permit_digest
from glotoken.eip712 import DOMAIN_TYPEHASH, PERMIT_TYPEHASH, Permit
from glotoken.errors import ExpiredDeadline, InvalidSignature, IsDenylisted, SystemPaused
from glotoken.safe_uint import U256_MAX
from slotvm.hashing import keccak_text
from slotvm.signing import SECP256K1_N, Signature, recover_address, sign_digest


def test_typehashes():
    assert DOMAIN_TYPEHASH == keccak_text(
        "EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"
    )
    assert PERMIT_TYPEHASH == keccak_text(
        "Permit(address owner,address spender,uint256 value,uint256 nonce,uint256 deadline)"
    )


def test_domain_separator_binds_name_version_chain_and_proxy(token, host):
    chain_id = host.block.chain_id
    assert token.domain_separator() == domain_separator_for("Glo Dollar", "1", chain_id, token.address)
    assert token.domain_separator() != domain_separator_for("Glo Dollar", "1", chain_id + 1, token.address)


def test_nonces_start_at_zero(token, user1):
    assert token.nonces(user1.address) == 0


def test_signed_permit_digest_recovers_owner(token, host, user1, user2, permit_signature):
    sig = permit_signature(user1, user2.address, 10, 2_000_000_000)
    digest = permit_digest(
        chain_id=host.block.chain_id,
        contract=token.address,
        owner=user1.address,
        spender=user2.address,
        value=10,
        nonce=0,
        deadline=2_000_000_000,
    )
    assert recover_address(digest, sig) == user1.address
    msg = Permit(owner=user1.address, spender=user2.address, value=10, nonce=0, deadline=2_000_000_000)
    assert msg.digest(token.domain_separator()) == digest


def test_permit_sets_allowance_and_bumps_nonce(token, host, user1, user2, user3, permit_signature):
    sig = permit_signature(user1, user2.address, 500, 2_000_000_000)
    # anyone may submit a valid permit
    token.call(user3.address, "permit", user1.address, user2.address, 500, 2_000_000_000, sig.to_bytes())
    assert token.allowance(user1.address, user2.address) == 500
    assert token.nonces(user1.address) == 1
    ev = host.events.last("Approval")
    assert (ev["owner"], ev["spender"], ev["value"]) == (user1.address, user2.address, 500)


def test_permit_accepts_signature_objects_and_tuples(token, user1, user2, permit_signature):
    sig = permit_signature(user1, user2.address, 1, U256_MAX)
    token.call(user2.address, "permit", user1.address, user2.address, 1, U256_MAX, sig)
    sig = permit_signature(user1, user2.address, 2, U256_MAX)
    token.call(user2.address, "permit", user1.address, user2.address, 2, U256_MAX, (sig.v, sig.r_bytes, sig.s_bytes))
    assert token.allowance(user1.address, user2.address) == 2
    assert token.nonces(user1.address) == 2


def test_replayed_permit_reverts(token, user1, user2, permit_signature):
    sig = permit_signature(user1, user2.address, 500, 2_000_000_000)
    token.call(user2.address, "permit", user1.address, user2.address, 500, 2_000_000_000, sig)
    with pytest.raises(InvalidSignature, match="ERC20Permit: invalid signature"):
        token.call(user2.address, "permit", user1.address, user2.address, 500, 2_000_000_000, sig)
    assert token.nonces(user1.address) == 1


def test_permit_signed_by_someone_else_reverts(token, host, user1, user2, user3):
    digest = permit_digest(
        chain_id=host.block.chain_id,
        contract=token.address,
        owner=user1.address,
        spender=user2.address,
        value=500,
        nonce=0,
        deadline=2_000_000_000,
    )
    sig = sign_digest(user3.key, digest)
    with pytest.raises(InvalidSignature) as info:
        token.call(user2.address, "permit", user1.address, user2.address, 500, 2_000_000_000, sig)
    assert info.value.signer == user3.address
    assert token.allowance(user1.address, user2.address) == 0
    assert token.nonces(user1.address) == 0


def test_permit_with_altered_value_reverts(token, user1, user2, permit_signature):
    sig = permit_signature(user1, user2.address, 500, 2_000_000_000)
    with pytest.raises(InvalidSignature):
        token.call(user2.address, "permit", user1.address, user2.address, 501, 2_000_000_000, sig)


def test_expired_permit_reverts(token, host, user1, user2, permit_signature):
    deadline = host.block.timestamp + 60
    sig = permit_signature(user1, user2.address, 1, deadline)
    host.advance(seconds=61)
    with pytest.raises(ExpiredDeadline, match="expired deadline"):
        token.call(user2.address, "permit", user1.address, user2.address, 1, deadline, sig)
    assert token.nonces(user1.address) == 0


def test_deadline_equal_to_now_is_accepted(token, host, user1, user2, permit_signature):
    deadline = host.block.timestamp
    sig = permit_signature(user1, user2.address, 1, deadline)
    token.call(user2.address, "permit", user1.address, user2.address, 1, deadline, sig)
    assert token.allowance(user1.address, user2.address) == 1


@pytest.mark.parametrize("raw", [b"", b"\x01" * 64, b"\x00" * 65, (27, "x", 1), (27, None, 1)])
def test_malformed_signature_reverts(token, user1, user2, raw):
    with pytest.raises(InvalidSignature):
        token.call(user2.address, "permit", user1.address, user2.address, 1, U256_MAX, raw)


def test_high_s_signature_reverts(token, user1, user2, permit_signature):
    sig = permit_signature(user1, user2.address, 1, U256_MAX)
    flipped = Signature(v=55 - sig.v, r=sig.r, s=SECP256K1_N - sig.s)
    with pytest.raises(InvalidSignature):
        token.call(user2.address, "permit", user1.address, user2.address, 1, U256_MAX, flipped)


def test_permit_respects_pause(token, admin, user1, user2, grant, permit_signature):
    grant(PAUSER_ROLE, admin.address)
    token.call(admin.address, "pause")
    sig = permit_signature(user1, user2.address, 1, U256_MAX)
    with pytest.raises(SystemPaused):
        token.call(user2.address, "permit", user1.address, user2.address, 1, U256_MAX, sig)


def test_permit_respects_denylist(token, admin, user1, user2, user3, grant, permit_signature):
    grant(DENYLISTER_ROLE, admin.address)
    sig = permit_signature(user1, user2.address, 1, U256_MAX)
    token.call(admin.address, "denylist", user2.address)
    with pytest.raises(IsDenylisted):
        token.call(user3.address, "permit", user1.address, user2.address, 1, U256_MAX, sig)

    # a denylisted submitter is not checked
    token.call(admin.address, "undenylist", user2.address)
    token.call(admin.address, "denylist", user3.address)
    token.call(user3.address, "permit", user1.address, user2.address, 1, U256_MAX, sig)
    assert token.allowance(user1.address, user2.address) == 1


def test_permit_domain_follows_the_proxy(host, admin, user1, user2, permit_signature):
    other = deploy_glo_dollar(host, admin.address)
    sig = permit_signature(user1, user2.address, 1, U256_MAX)
    with pytest.raises(InvalidSignature):
        other.call(user2.address, "permit", user1.address, user2.address, 1, U256_MAX, sig)
