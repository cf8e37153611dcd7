"""
Integration tests for the platform entry points.

The real contract clients run against a mocked Web3 contract, so the full
path payload -> dispatcher -> evaluators -> fetchers -> serialised result
is exercised without an RPC endpoint.
"""

import dataclasses
import time
from unittest.mock import MagicMock, patch

import pytest

from keeper.core.dispatcher import (
    DEPOSIT_SIG,
    POOL_SUPPLY_SIG,
    PRICE_UPDATE_SIG,
    WITHDRAW_SIG,
    EvaluationError,
)
from keeper.handlers import match_handler, notify_handler
from keeper.handlers.context import build_context
from keeper.notifications.alerts import NotificationClient

from conftest import (
    ORACLE,
    POOL,
    RATE_4_PCT,
    RESERVE,
    STRATEGY_A,
    STRATEGY_B,
    make_reserve_data,
)


@pytest.fixture
def contract():
    """One contract mock answering every view the keeper calls."""
    now = int(time.time())
    mock = MagicMock()
    f = mock.functions
    f.debtUSD.return_value.call.return_value = 100 * 10 ** 8
    f.collateralUSD.return_value.call.return_value = 300 * 10 ** 8
    f.currentCollateralRatio.return_value.call.return_value = 3 * 10 ** 8
    f.getCollateralRatioTargets.return_value.call.return_value = (
        3 * 10 ** 8, 28 * 10 ** 7, 32 * 10 ** 7, 27 * 10 ** 7, 33 * 10 ** 7
    )
    f.equity.return_value.call.return_value = 1000 * 10 ** 18
    f.totalSupply.return_value.call.return_value = 1000 * 10 ** 18
    f.rebalanceNeeded.return_value.call.return_value = False
    f.latestAnswer.return_value.call.return_value = 2000 * 10 ** 8
    # started 10000s ago (sequencer past grace), updated 60s ago (oracle fresh)
    f.latestRoundData.return_value.call.return_value = (10, 2000 * 10 ** 8, now - 10000, now - 60, 10)
    f.getReserveData.return_value.call.return_value = dataclasses.astuple(make_reserve_data(RATE_4_PCT))
    return mock


@pytest.fixture
def overrides(mock_web3, contract, deployment, store):
    mock_web3.eth.contract.return_value = contract
    return {"w3": mock_web3, "deployment": deployment, "store": store}


def payload(*reasons, event_hash="0xabc"):
    return {"request": {"body": {"events": [{"hash": event_hash, "matchReasons": list(reasons)}]}}}


class TestMatchHandler:

    @pytest.mark.integration
    def test_no_matches(self, overrides):
        result = match_handler(payload({"signature": WITHDRAW_SIG, "address": STRATEGY_A}), **overrides)
        assert result == {"matches": []}

    @pytest.mark.integration
    def test_withdraw_at_risk(self, overrides, contract):
        contract.functions.collateralUSD.return_value.call.return_value = 105 * 10 ** 8

        result = match_handler(payload({"signature": WITHDRAW_SIG, "address": STRATEGY_A}), **overrides)

        assert result == {"matches": [{
            "hash": "0xabc",
            "metadata": {
                "type": "withdraw",
                "strategy": STRATEGY_A,
                "riskState": {"isAtRisk": True, "healthFactor": "105000000"},
            },
        }]}

    @pytest.mark.integration
    def test_deposit_eps_decrease_across_invocations(self, overrides, contract):
        """The store carries equity per share from one invocation to the next."""
        reason = {"signature": DEPOSIT_SIG, "address": STRATEGY_B}
        assert match_handler(payload(reason), **overrides) == {"matches": []}

        contract.functions.equity.return_value.call.return_value = 900 * 10 ** 18
        result = match_handler(payload(reason), **overrides)

        metadata = result["matches"][0]["metadata"]
        assert metadata["type"] == "deposit"
        assert metadata["EPSState"] == {
            "hasEPSDecreased": True,
            "previous": str(10 ** 18),
            "current": str(9 * 10 ** 17),
        }

    @pytest.mark.integration
    def test_price_update(self, overrides, contract):
        contract.functions.rebalanceNeeded.return_value.call.return_value = True

        result = match_handler(payload({"signature": PRICE_UPDATE_SIG, "address": ORACLE}), **overrides)

        metadata = result["matches"][0]["metadata"]
        assert metadata["type"] == "priceUpdate"
        assert metadata["latestAnswer"] == "200000000000"
        assert metadata["strategiesToRebalance"] == [STRATEGY_A, STRATEGY_B]
        assert metadata["isSequencerOut"] is False
        assert metadata["oracleState"]["isOut"] is False
        assert metadata["sequencerState"]["isOut"] is False

    @pytest.mark.integration
    def test_pool_action(self, overrides):
        reason = {"signature": POOL_SUPPLY_SIG, "address": POOL, "args": [RESERVE, STRATEGY_A, STRATEGY_A, "1", "0"]}

        result = match_handler(payload(reason), **overrides)

        assert result["matches"] == [{
            "hash": "0xabc",
            "metadata": {
                "type": "borrowRate",
                "reserve": RESERVE,
                "currBorrowRate": str(RATE_4_PCT),
                "affectedStrategies": [STRATEGY_A],
            },
        }]

    @pytest.mark.integration
    def test_errors_propagate(self, overrides, contract):
        contract.functions.debtUSD.return_value.call.side_effect = RuntimeError("rpc down")
        with pytest.raises(EvaluationError):
            match_handler(payload({"signature": WITHDRAW_SIG, "address": STRATEGY_A}), **overrides)


class TestNotifyHandler:

    @pytest.mark.integration
    def test_sends_alerts(self, overrides, contract):
        contract.functions.collateralUSD.return_value.call.return_value = 105 * 10 ** 8
        client = NotificationClient(slack_webhook="https://hooks.slack.test/services/x")

        with patch("requests.post") as mock_post:
            result = notify_handler(
                payload({"signature": WITHDRAW_SIG, "address": STRATEGY_A}),
                {"notification_client": client},
                **overrides,
            )

        assert result["notified"] == 1
        assert len(result["matches"]) == 1
        attachment = mock_post.call_args[1]["json"]["attachments"][0]
        assert "health factor" in attachment["title"]
        assert attachment["text"] == "withdraw event 0xabc"
        assert attachment["fields"][0]["value"] == f"3x wstETH/WETH ({STRATEGY_A})"

    @pytest.mark.integration
    def test_nothing_to_send(self, overrides):
        client = NotificationClient(slack_webhook="https://hooks.slack.test/services/x")
        with patch("requests.post") as mock_post:
            result = notify_handler(
                payload({"signature": WITHDRAW_SIG, "address": STRATEGY_A}),
                {"notification_client": client},
                **overrides,
            )
        assert result == {"matches": [], "notified": 0}
        mock_post.assert_not_called()


class TestBuildContext:

    @pytest.mark.integration
    def test_rpc_url_from_payload_secrets(self, deployment, store):
        with patch("keeper.handlers.context.connect") as mock_connect:
            ctx = build_context(
                {"secrets": {"RPC_URL": "https://rpc.test"}}, deployment=deployment, store=store
            )
        mock_connect.assert_called_once_with("https://rpc.test")
        assert ctx.w3 is mock_connect.return_value
        assert ctx.deployment is deployment

    @pytest.mark.integration
    def test_store_from_payload(self, deployment, mock_web3):
        with patch("keeper.handlers.context.store_from_payload") as mock_store:
            ctx = build_context({"secrets": {}}, w3=mock_web3, deployment=deployment)
        assert ctx.store is mock_store.return_value
