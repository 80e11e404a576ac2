"""
Contract ABI for the certificate registry.

Calldata is ``selector(4 bytes) + abi.encode(args)``; the selector is the
first four bytes of keccak256 over the canonical signature.

Contract surface:
    issueCertificate(string certId, string studentId, string certType,
                     string ipfsCid, string fileHash, string metadataHash,
                     address studentWallet)
    verifyCertificate(string certId) -> bool
    getCertificate(string certId) -> (string certId, string studentId,
        string certType, string ipfsCid, string fileHash, string metadataHash,
        address issuer, address studentWallet, uint256 timestamp, bool revoked)
    registerStudentWallet(string studentId, address wallet)
    getStudentWallet(string studentId) -> address
    revokeCertificate(string certId)
"""

from __future__ import annotations

from typing import Any, Sequence

from eth_abi import decode, encode
from eth_abi.exceptions import EncodingError
from eth_utils import (
    decode_hex,
    encode_hex,
    function_signature_to_4byte_selector,
    is_hex_address,
    to_checksum_address,
)

from blockcred.errors import UpstreamError, ValidationError
from blockcred.schemas.certificate import CertType
from blockcred.schemas.ledger import ZERO_ADDRESS, OnChainRecord

ISSUE_CERTIFICATE = "issueCertificate(string,string,string,string,string,string,address)"
VERIFY_CERTIFICATE = "verifyCertificate(string)"
GET_CERTIFICATE = "getCertificate(string)"
REGISTER_STUDENT_WALLET = "registerStudentWallet(string,address)"
GET_STUDENT_WALLET = "getStudentWallet(string)"
REVOKE_CERTIFICATE = "revokeCertificate(string)"

GET_CERTIFICATE_OUTPUTS = [
    "string", "string", "string", "string", "string", "string",
    "address", "address", "uint256", "bool",
]


def _arg_types(signature: str) -> list[str]:
    inner = signature[signature.index("(") + 1 : -1]
    return [t for t in inner.split(",") if t]


def encode_call(signature: str, args: Sequence[Any]) -> str:
    """Hex calldata for ``signature`` applied to ``args``."""
    selector = function_signature_to_4byte_selector(signature)
    try:
        encoded = encode(_arg_types(signature), list(args))
    except EncodingError as e:
        raise ValidationError(f"cannot encode {signature}: {e}") from e
    return encode_hex(selector + encoded)


def checksum(address: str) -> str:
    """Validate and checksum an address. Empty means the zero address."""
    if not address:
        return to_checksum_address(ZERO_ADDRESS)
    if not is_hex_address(address):
        raise ValidationError(f"invalid address {address!r}")
    return to_checksum_address(address)


def _decode(types: list[str], result: Any, what: str) -> tuple:
    if not isinstance(result, str) or result in ("0x", ""):
        raise UpstreamError(f"empty {what} result")
    try:
        return decode(types, decode_hex(result))
    except Exception as e:
        raise UpstreamError(f"cannot decode {what} result: {e}") from e


def issue_certificate_call(record: OnChainRecord, content_cid: str) -> str:
    return encode_call(
        ISSUE_CERTIFICATE,
        [
            record.cert_id,
            record.student_id,
            record.cert_type.value,
            content_cid,
            record.credential_hash,
            record.metadata_hash,
            checksum(record.student_wallet),
        ],
    )


def decode_bool(result: Any) -> bool:
    return bool(_decode(["bool"], result, "bool")[0])


def decode_address(result: Any) -> str:
    return to_checksum_address(_decode(["address"], result, "address")[0])


def decode_certificate(result: Any) -> OnChainRecord:
    (
        cert_id, student_id, cert_type, ipfs_cid, file_hash, metadata_hash,
        issuer, student_wallet, timestamp, revoked,
    ) = _decode(GET_CERTIFICATE_OUTPUTS, result, "getCertificate")
    if not cert_id:
        raise UpstreamError("getCertificate returned an empty record")
    try:
        parsed_type = CertType(cert_type)
    except ValueError as e:
        raise UpstreamError(f"unknown certificate type on ledger: {cert_type!r}") from e
    return OnChainRecord(
        cert_id=cert_id,
        student_id=student_id,
        credential_hash=file_hash,
        metadata_hash=metadata_hash,
        issuer_address=to_checksum_address(issuer),
        student_wallet=to_checksum_address(student_wallet),
        cert_type=parsed_type,
        timestamp=int(timestamp),
        content_cid=ipfs_cid,
        revoked=bool(revoked),
    )
