"""
Test suite for EIP-3009 authorization signing and the X-PAYMENT envelope.
"""
import base64
import json

import pytest

from x402_pinion.adapters.evm.constants import (
    BASE_CHAIN_ID,
    BASE_SEPOLIA_CHAIN_ID,
    USDC_ADDRESS,
    resolve_chain_id,
)
from x402_pinion.adapters.evm.signatures import (
    EvmSigner,
    build_authorization,
    generate_nonce,
    recover_payment_signer,
    sign_payment,
    sign_transfer_authorization,
)
from x402_pinion.adapters.evm.standards import EIP712Domain, ERC3009TypedData
from x402_pinion.engine.exceptions import ConfigError, PaymentSignatureError
from x402_pinion.schemas.https import PaymentRequirement, SignedPayment

from conftest import MOCK_ADDRESS, MOCK_PAY_TO, MOCK_PRIVATE_KEY, make_requirement


NOW = 1700000000
NONCE_A = "0x" + "11" * 32
NONCE_B = "0x" + "22" * 32


@pytest.fixture
def requirement():
    return PaymentRequirement.model_validate(make_requirement())


def test_nonce_format_and_uniqueness():
    nonces = {generate_nonce() for _ in range(50)}
    assert len(nonces) == 50
    for nonce in nonces:
        assert nonce.startswith("0x")
        assert len(nonce) == 66
        int(nonce, 16)


def test_authorization_window(requirement):
    authorization = build_authorization(MOCK_ADDRESS, requirement, nonce=NONCE_A, now=NOW)
    assert authorization.from_ == MOCK_ADDRESS
    assert authorization.to == MOCK_PAY_TO
    assert authorization.value == "10000"
    assert authorization.valid_after == str(NOW - 600)
    assert authorization.valid_before == str(NOW + 900)
    assert authorization.nonce == NONCE_A


def test_authorization_window_uses_server_timeout():
    requirement = PaymentRequirement.model_validate(make_requirement(maxTimeoutSeconds=60))
    authorization = build_authorization(MOCK_ADDRESS, requirement, nonce=NONCE_A, now=NOW)
    assert authorization.valid_before == str(NOW + 60)


def test_authorization_window_defaults_without_timeout():
    entry = make_requirement()
    del entry["maxTimeoutSeconds"]
    requirement = PaymentRequirement.model_validate(entry)
    authorization = build_authorization(MOCK_ADDRESS, requirement, nonce=NONCE_A, now=NOW)
    assert authorization.valid_before == str(NOW + 900)


def test_signing_is_deterministic(requirement):
    authorization = build_authorization(MOCK_ADDRESS, requirement, nonce=NONCE_A, now=NOW)
    first = sign_transfer_authorization(MOCK_PRIVATE_KEY, authorization, requirement)
    second = sign_transfer_authorization(MOCK_PRIVATE_KEY, authorization, requirement)
    assert first == second
    assert first.startswith("0x")
    assert len(first) == 2 + 65 * 2


def test_different_nonces_give_different_signatures(requirement):
    a = sign_payment(MOCK_PRIVATE_KEY, requirement, 1, nonce=NONCE_A, now=NOW)
    b = sign_payment(MOCK_PRIVATE_KEY, requirement, 1, nonce=NONCE_B, now=NOW)
    assert a.payload.signature != b.payload.signature


def test_signature_recovers_to_payer(requirement):
    envelope = sign_payment(MOCK_PRIVATE_KEY, requirement, 1)
    assert recover_payment_signer(envelope, requirement) == MOCK_ADDRESS


def test_signature_is_bound_to_chain(requirement):
    envelope = sign_payment(MOCK_PRIVATE_KEY, requirement, 1, nonce=NONCE_A, now=NOW)
    sepolia = PaymentRequirement.model_validate(make_requirement(network="base-sepolia"))
    assert recover_payment_signer(envelope, sepolia) != MOCK_ADDRESS


def test_header_envelope_layout(requirement):
    envelope = sign_payment(MOCK_PRIVATE_KEY, requirement, 1, nonce=NONCE_A, now=NOW)
    decoded = json.loads(base64.b64decode(envelope.to_header()))

    assert list(decoded) == ["x402Version", "scheme", "network", "payload"]
    assert decoded["x402Version"] == 1
    assert decoded["scheme"] == "exact"
    assert decoded["network"] == "base"
    assert set(decoded["payload"]) == {"signature", "authorization"}
    assert decoded["payload"]["authorization"] == {
        "from": MOCK_ADDRESS,
        "to": MOCK_PAY_TO,
        "value": "10000",
        "validAfter": str(NOW - 600),
        "validBefore": str(NOW + 900),
        "nonce": NONCE_A,
    }


def test_header_decodes_back(requirement):
    envelope = sign_payment(MOCK_PRIVATE_KEY, requirement, 2, nonce=NONCE_A, now=NOW)
    assert SignedPayment.from_header(envelope.to_header()) == envelope


def test_domain_fallbacks():
    requirement = PaymentRequirement.model_validate(
        {"scheme": "exact", "network": "unknown-chain", "payTo": MOCK_PAY_TO, "maxAmountRequired": "1"}
    )
    assert EIP712Domain.for_requirement(requirement).to_dict() == {
        "name": "USD Coin",
        "version": "2",
        "chainId": BASE_CHAIN_ID,
        "verifyingContract": USDC_ADDRESS,
    }


def test_domain_uses_requirement_hints():
    requirement = PaymentRequirement.model_validate(
        make_requirement(
            network="base-sepolia",
            asset="0x036CbD53842c5426634e7929541eC2318f3dCF7e",
            extra={"name": "USDC", "version": "2"},
        )
    )
    domain = EIP712Domain.for_requirement(requirement)
    assert domain.name == "USDC"
    assert domain.chainId == BASE_SEPOLIA_CHAIN_ID
    assert domain.verifyingContract == "0x036CbD53842c5426634e7929541eC2318f3dCF7e"


def test_typed_data_layout(requirement):
    authorization = build_authorization(MOCK_ADDRESS, requirement, nonce=NONCE_A, now=NOW)
    typed = ERC3009TypedData.build(authorization, requirement).to_dict()
    assert typed["primaryType"] == "TransferWithAuthorization"
    assert [f["name"] for f in typed["types"]["TransferWithAuthorization"]] == [
        "from", "to", "value", "validAfter", "validBefore", "nonce",
    ]
    assert typed["message"]["value"] == 10000
    assert typed["message"]["validAfter"] == NOW - 600


@pytest.mark.parametrize(
    "network, chain_id",
    [
        ("base", 8453),
        ("eip155:8453", 8453),
        ("base-sepolia", 84532),
        ("eip155:84532", 84532),
        ("Base-Sepolia", 84532),
        ("polygon", 8453),
        ("", 8453),
    ],
)
def test_resolve_chain_id(network, chain_id):
    assert resolve_chain_id(network) == chain_id


def test_signer_exposes_address():
    signer = EvmSigner(MOCK_PRIVATE_KEY)
    assert signer.address == MOCK_ADDRESS
    assert MOCK_PRIVATE_KEY not in repr(signer)


@pytest.mark.parametrize("key", ["", "0x1234", "not-a-key", None])
def test_signer_rejects_invalid_key(key):
    with pytest.raises(ConfigError):
        EvmSigner(key)


def test_unsignable_requirement_raises_signature_error():
    requirement = PaymentRequirement.model_validate(
        {"scheme": "exact", "network": "base", "payTo": "0xServer", "maxAmountRequired": "10000"}
    )
    with pytest.raises(PaymentSignatureError):
        sign_payment(MOCK_PRIVATE_KEY, requirement, 1)
