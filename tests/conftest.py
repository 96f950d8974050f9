"""Shared fixtures: a fake JSON-RPC node built on httpx.MockTransport."""

import inspect
import json

import httpx
import pytest

from solana_balance_checker.balances import STAKE_PROGRAM_ID


def rpc_envelope(result):
    return {"jsonrpc": "2.0", "result": result, "id": 1}


@pytest.fixture
def rpc_node():
    """Factory for a MockTransport answering JSON-RPC calls by method name.

    Each value in ``responses`` is either a ``result`` payload, an
    ``httpx.Response`` returned as-is, or a (sync or async) callable taking
    the decoded request and returning one of those.
    """

    def factory(responses, calls=None):
        async def handler(request: httpx.Request) -> httpx.Response:
            payload = json.loads(request.content)
            if calls is not None:
                calls.append(payload)
            answer = responses[payload["method"]]
            if callable(answer):
                answer = answer(payload)
                if inspect.isawaitable(answer):
                    answer = await answer
            if isinstance(answer, httpx.Response):
                return answer
            return httpx.Response(200, json=rpc_envelope(answer))

        return httpx.MockTransport(handler)

    return factory


@pytest.fixture
def account_info_result():
    def build(lamports):
        return {
            "context": {"slot": 1234},
            "value": {
                "data": ["", "base64"],
                "executable": False,
                "lamports": lamports,
                "owner": "11111111111111111111111111111111",
                "rentEpoch": 0,
            },
        }

    return build


@pytest.fixture
def stake_account():
    def build(stake="500000000", account_type="delegated", pubkey="TESTPUBKEY"):
        info = {
            "meta": {
                "authorized": {"staker": STAKE_PROGRAM_ID, "withdrawer": STAKE_PROGRAM_ID},
                "lockup": {"custodian": "11111111111111111111111111111111", "epoch": 0, "unixTimestamp": 0},
                "rentExemptReserve": "2282880",
            },
        }
        if account_type == "delegated":
            info["stake"] = {
                "creditsObserved": 1234,
                "delegation": {
                    "activationEpoch": "123",
                    "deactivationEpoch": "18446744073709551615",
                    "stake": stake,
                    "voter": "Vote111111111111111111111111111111111111111",
                },
            }
        return {
            "account": {
                "data": {"parsed": {"info": info, "type": account_type}, "program": "stake", "space": 200},
                "executable": False,
                "lamports": 500000000,
                "owner": STAKE_PROGRAM_ID,
                "rentEpoch": 0,
            },
            "pubkey": pubkey,
        }

    return build
