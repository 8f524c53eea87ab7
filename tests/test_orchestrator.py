import logging

import pytest

from storefront_payments.core.errors import (
    CartNotFound,
    GatewayError,
    MethodsConfigError,
    PaymentError,
    UnsupportedCombination,
    VaultError,
)
from storefront_payments.core.models import MethodKind, TokenizationParams
from storefront_payments.core.orchestrator import PaymentOrchestrator
from storefront_payments.core.outcomes import Failure, Redirect, Success
from storefront_payments.core.stripe import StripeBancontactStrategy, StripeKlarnaStrategy


def _stripe_card_element(stripe):
    return stripe.elements_instances[-1].created[0]


class TestPreconditions:
    @pytest.mark.asyncio
    async def test_create_elements_requires_cart(self, orchestrator, api):
        api.routes[("get", "/cart")] = None

        with pytest.raises(CartNotFound):
            await orchestrator.create_elements({"card": {}, "paypal": {}})

    @pytest.mark.asyncio
    async def test_tokenize_requires_cart(self, orchestrator, api):
        api.routes[("get", "/cart")] = None

        with pytest.raises(CartNotFound):
            await orchestrator.tokenize({"card": {"on_error": lambda err: None}})

    @pytest.mark.asyncio
    async def test_methods_error_is_fatal(self, orchestrator, api):
        api.routes[("get", "/settings/payments")] = {"error": "Payment gateway misconfigured"}

        with pytest.raises(MethodsConfigError, match="misconfigured"):
            await orchestrator.create_elements({"card": {}})

    @pytest.mark.asyncio
    async def test_tokenize_without_params(self, orchestrator):
        with pytest.raises(PaymentError) as excinfo:
            await orchestrator.tokenize()

        assert excinfo.value.code == "missing_params"


class TestCreateElements:
    @pytest.mark.asyncio
    async def test_mounts_stripe_card_element(self, orchestrator, page, stripe):
        on_change = lambda event: None  # noqa: E731
        warnings = await orchestrator.create_elements(
            {
                "card": {
                    "element_id": "#checkout-card",
                    "options": {"hidePostalCode": True},
                    "on_change": on_change,
                    "on_ready": "ignored",
                }
            }
        )

        assert warnings == []
        assert page.scripts == [("stripe-js", "https://js.stripe.com/v3/")]
        assert stripe.keys == ["pk_test_1"]
        element = _stripe_card_element(stripe)
        assert element.type == "card"
        assert element.selector == "#checkout-card"
        assert element.options == {"hidePostalCode": True}
        assert element.handlers == {"change": on_change}
        assert orchestrator.context.elements.get("stripe") is element
        assert orchestrator.context.elements.client("stripe") is stripe

    @pytest.mark.asyncio
    async def test_mounts_separate_card_elements(self, orchestrator, stripe):
        await orchestrator.create_elements(
            {
                "card": {
                    "separate_elements": True,
                    "card_number": {"element_id": "#number"},
                    "card_cvc": {"element_id": "#cvc"},
                }
            }
        )

        created = stripe.elements_instances[-1].created
        assert [(element.type, element.selector) for element in created] == [
            ("cardNumber", "#number"),
            ("cardExpiry", "#cardExpiry-element"),
            ("cardCvc", "#cvc"),
        ]
        assert orchestrator.context.elements.get("stripe") is created[0]

    @pytest.mark.asyncio
    async def test_script_is_not_reloaded_once_present(self, orchestrator, page, stripe):
        await orchestrator.create_elements({"card": {}})
        await orchestrator.create_elements({"card": {}})

        assert len(page.scripts) == 1
        assert len(stripe.elements_instances) == 2

    @pytest.mark.asyncio
    async def test_disabled_methods_are_warned_not_mounted(self, orchestrator, api, page, caplog):
        api.routes[("get", "/settings/payments")] = {"ideal": {"enabled": True}}

        with caplog.at_level(logging.WARNING):
            warnings = await orchestrator.create_elements({"card": {}, "ideal": {}, "paypal": {}})

        assert [warning.method for warning in warnings] == ["card", "card", "paypal"]
        assert "credit card payments are disabled" in caplog.text
        assert "PayPal payments are disabled" in caplog.text
        assert page.scripts == []

    @pytest.mark.asyncio
    async def test_unsupported_gateway_is_warned(self, orchestrator, api):
        api.routes[("get", "/settings/payments")] = {
            "card": {"gateway": "braintree"},
        }

        warnings = await orchestrator.create_elements({"card": {}})

        assert len(warnings) == 1
        assert "not supported by the 'braintree' gateway" in warnings[0].message

    @pytest.mark.asyncio
    async def test_redirect_methods_have_nothing_to_mount(self, orchestrator, page):
        warnings = await orchestrator.create_elements({"klarna": {}, "bancontact": {}})

        assert warnings == []
        assert page.scripts == []


class TestStripeCard:
    @pytest.mark.asyncio
    async def test_tokenize_confirms_and_updates_cart(self, orchestrator, api, vault, stripe):
        successes = []
        await orchestrator.create_elements({"card": {"on_success": lambda: successes.append(True)}})

        outcome = await orchestrator.tokenize()

        assert isinstance(outcome, Success)
        updates = api.calls_to("put", "/cart")
        assert len(updates) == 1
        billing = updates[0]["billing"]
        assert billing["method"] == "card"
        assert billing["intent"]["stripe"]["id"] == "pi_1"
        assert billing["card"]["token"] == "pm_1"
        assert billing["card"]["last4"] == "4242"
        assert successes == [True]
        assert ("confirmCardPayment", "cs_1") in stripe.calls

    @pytest.mark.asyncio
    async def test_intent_payload_uses_minor_units(self, orchestrator, api, vault, stripe, cart):
        cart["account"]["stripe_customer"] = "cus_1"
        api.routes[("get", "/cart")] = cart
        await orchestrator.create_elements({"card": {}})

        await orchestrator.tokenize()

        body = vault.calls_to("post", "/intent")[0]
        assert body["gateway"] == "stripe"
        assert body["intent"] == {
            "payment_method": "pm_1",
            "amount": 1050,
            "currency": "eur",
            "capture_method": "manual",
            "setup_future_usage": "off_session",
            "customer": "cus_1",
        }

    @pytest.mark.asyncio
    async def test_card_takes_precedence_over_ideal(self, orchestrator, api, vault, stripe):
        api.routes[("get", "/settings/payments")] = {"card": {"gateway": "stripe", "publishable_key": "pk"}}
        await orchestrator.create_elements({"card": {}})

        outcome = await orchestrator.tokenize({"card": {}, "ideal": {}})

        assert outcome.method is MethodKind.CARD
        payment_method_types = [data["type"] for name, data in stripe.calls if name == "createPaymentMethod"]
        assert payment_method_types == ["card"]
        assert "payment_method_types" not in vault.calls_to("post", "/intent")[0]["intent"]

    @pytest.mark.asyncio
    async def test_confirmation_error_goes_to_hook(self, orchestrator, api, stripe):
        errors = []
        stripe.confirm_result = {"error": {"type": "card_error", "code": "card_declined", "message": "Declined"}}
        await orchestrator.create_elements({"card": {"on_error": errors.append}})

        outcome = await orchestrator.tokenize()

        assert isinstance(outcome, Failure)
        assert outcome.handled is True
        assert isinstance(errors[0], GatewayError)
        assert errors[0].code == "card_declined"
        assert api.calls_to("put", "/cart") == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["requires_capture", "succeeded"])
    async def test_confirmed_intent_skips_card_confirmation(self, orchestrator, api, vault, stripe, status):
        vault.routes[("post", "/intent")] = {"id": "pi_done", "status": status, "client_secret": "cs_done"}
        await orchestrator.create_elements({"card": {}})

        outcome = await orchestrator.tokenize()

        assert isinstance(outcome, Success)
        assert [name for name, _ in stripe.calls] == ["createPaymentMethod"]
        assert api.calls_to("put", "/cart")[0]["billing"]["intent"] == {"stripe": {"id": "pi_done"}}

    @pytest.mark.asyncio
    async def test_unexpected_intent_status_is_an_error(self, orchestrator, api, vault, stripe):
        errors = []
        vault.routes[("post", "/intent")] = {"id": "pi_2", "status": "requires_payment_method"}
        await orchestrator.create_elements({"card": {"on_error": errors.append}})

        outcome = await orchestrator.tokenize()

        assert isinstance(outcome, Failure)
        assert outcome.handled is True
        assert errors[0].code == "intent_status"
        assert "requires_payment_method" in errors[0].message
        assert api.calls_to("put", "/cart") == []

    @pytest.mark.asyncio
    async def test_success_hook_errors_go_to_error_hook(self, orchestrator, api, stripe):
        errors = []

        def on_success():
            raise RuntimeError("hook failed")

        await orchestrator.create_elements({"card": {"on_success": on_success, "on_error": errors.append}})

        outcome = await orchestrator.tokenize()

        assert isinstance(outcome, Failure)
        assert outcome.handled is True
        assert outcome.method is MethodKind.CARD
        assert isinstance(errors[0], GatewayError)
        assert errors[0].message == "hook failed"
        assert isinstance(errors[0].__cause__, RuntimeError)
        assert len(api.calls_to("put", "/cart")) == 1

    @pytest.mark.asyncio
    async def test_success_hook_error_without_error_hook_is_raised(self, orchestrator, stripe):
        def on_success():
            raise RuntimeError("hook failed")

        await orchestrator.create_elements({"card": {"on_success": on_success}})

        with pytest.raises(GatewayError, match="hook failed"):
            await orchestrator.tokenize()

    @pytest.mark.asyncio
    async def test_vault_error_without_hook_is_raised(self, orchestrator, vault, stripe):
        vault.routes[("post", "/intent")] = {"errors": {"payment_method": {"message": "invalid"}}}
        await orchestrator.create_elements({"card": {}})

        with pytest.raises(VaultError) as excinfo:
            await orchestrator.tokenize()

        assert excinfo.value.param == "payment_method"
        assert excinfo.value.status == 402

    @pytest.mark.asyncio
    async def test_tokenize_before_mount_fails(self, orchestrator, vault):
        with pytest.raises(GatewayError) as excinfo:
            await orchestrator.tokenize({"card": {}})

        assert excinfo.value.code == "element_not_mounted"
        assert vault.calls == []

    @pytest.mark.asyncio
    async def test_orchestrators_do_not_share_elements(self, orchestrator, config, page, api, vault, stripe):
        await orchestrator.create_elements({"card": {}})
        other = PaymentOrchestrator(config, page, api=api, vault=vault)

        with pytest.raises(GatewayError):
            await other.tokenize({"card": {}})


class TestSaferpay:
    @pytest.fixture(autouse=True)
    def saferpay_methods(self, api, vault):
        api.routes[("get", "/settings/payments")] = {"card": {"gateway": "saferpay"}}
        vault.routes[("post", "/intent")] = {
            "token": "sp_token",
            "redirect_url": "https://saferpay.example.com/pay/sp_token",
        }

    @pytest.mark.asyncio
    async def test_supplied_intent_is_used_verbatim(self, orchestrator, api, vault, page):
        supplied = {"amount": {"value": 999, "currency_code": "CHF"}, "description": "Custom"}

        outcome = await orchestrator.tokenize({"card": {"intent": supplied}})

        assert vault.calls_to("post", "/intent") == [{"gateway": "saferpay", "intent": supplied}]
        assert api.calls_to("put", "/cart") == [{"billing": {"intent": {"saferpay": {"token": "sp_token"}}}}]
        assert isinstance(outcome, Redirect)
        assert page.navigated == ["https://saferpay.example.com/pay/sp_token"]

    @pytest.mark.asyncio
    async def test_payment_page_data_is_derived_from_cart(self, orchestrator, vault, page):
        await orchestrator.tokenize({"card": {}})

        intent = vault.calls_to("post", "/intent")[0]["intent"]
        assert intent["amount"] == {"value": 1050, "currency_code": "EUR"}
        assert intent["description"] == "Order 1001"
        assert intent["return_urls"]["success"] == (
            "https://shop.example.com/checkout?gateway=saferpay&redirect_status=succeeded"
        )
        assert intent["return_urls"]["fail"].endswith("redirect_status=failed")

    @pytest.mark.asyncio
    async def test_intent_without_redirect_url_fails(self, orchestrator, api, vault, page):
        errors = []
        vault.routes[("post", "/intent")] = {"token": "sp_token"}

        outcome = await orchestrator.tokenize({"card": {"on_error": errors.append}})

        assert isinstance(outcome, Failure)
        assert errors[0].code == "missing_redirect"
        assert api.calls_to("put", "/cart") == []
        assert page.navigated == []


class TestRedirectMethods:
    @pytest.mark.asyncio
    async def test_ideal_runs_card_action(self, orchestrator, api, vault, stripe, page):
        vault.routes[("post", "/intent")] = {"id": "pi_ideal", "status": "requires_action", "client_secret": "cs_ideal"}
        await orchestrator.create_elements({"ideal": {}})

        outcome = await orchestrator.tokenize()

        name, data = stripe.calls[0]
        assert (name, data["type"]) == ("createPaymentMethod", "ideal")
        assert data["billing_details"]["name"] == "Ada Lovelace"
        intent = vault.calls_to("post", "/intent")[0]["intent"]
        assert intent["confirm"] is True
        assert intent["payment_method_types"] == "ideal"
        assert intent["return_url"] == page.location
        assert api.calls_to("put", "/cart")[0]["billing"] == {
            "method": "ideal",
            "ideal": {"token": "pm_1"},
            "intent": {"stripe": {"id": "pi_ideal"}},
        }
        assert ("handleCardAction", "cs_ideal") in stripe.calls
        assert outcome.action == stripe.card_action_result

    @pytest.mark.asyncio
    async def test_klarna_redirects_to_source(self, orchestrator, api, stripe, page):
        outcome = await orchestrator.tokenize({"klarna": {}})

        assert page.scripts == [("stripe-js", "https://js.stripe.com/v3/")]
        name, source = stripe.calls[0]
        assert name == "createSource"
        assert source["type"] == "klarna"
        assert source["amount"] == 1050
        assert source["currency"] == "eur"
        assert source["klarna"]["purchase_country"] == "NL"
        assert source["klarna"]["first_name"] == "Ada"
        assert source["redirect"]["return_url"] == page.location
        assert [item["type"] for item in source["source_order"]["items"]] == ["sku", "shipping", "tax"]
        assert api.calls_to("put", "/cart") == [{"billing": {"method": "klarna"}}]
        assert isinstance(outcome, Redirect)
        assert page.navigated == ["https://hooks.stripe.com/redirect/src_1"]

    @pytest.mark.asyncio
    async def test_bancontact_redirects_to_source(self, orchestrator, api, stripe, page):
        await orchestrator.tokenize({"bancontact": {}})

        name, source = stripe.calls[0]
        assert source == {
            "type": "bancontact",
            "amount": 1050,
            "currency": "eur",
            "owner": {"name": "Ada Lovelace"},
            "redirect": {"return_url": page.location},
        }
        assert api.calls_to("put", "/cart") == [{"billing": {"method": "bancontact"}}]
        assert page.navigated == ["https://hooks.stripe.com/redirect/src_1"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("strategy_type", [StripeKlarnaStrategy, StripeBancontactStrategy])
    async def test_redirect_strategies_mount_nothing(self, orchestrator, api, stripe, strategy_type):
        strategy = strategy_type(orchestrator.context)
        methods = await orchestrator.context.settings.payments()

        replaced = await strategy.mount(TokenizationParams.from_mapping({strategy.method.value: {}}), {}, methods)

        assert replaced is None
        assert strategy.mounts is False
        assert stripe.keys == []
        assert orchestrator.context.elements.client("stripe") is None

    @pytest.mark.asyncio
    async def test_source_error_skips_redirect(self, orchestrator, api, stripe, page):
        errors = []
        stripe.source_result = {"error": {"message": "Klarna is unavailable"}}

        outcome = await orchestrator.tokenize({"klarna": {"on_error": errors.append}})

        assert isinstance(outcome, Failure)
        assert errors[0].message == "Klarna is unavailable"
        assert api.calls_to("put", "/cart") == []
        assert page.navigated == []


class TestDispatch:
    @pytest.mark.asyncio
    async def test_unknown_gateway_is_rejected(self, orchestrator, api):
        api.routes[("get", "/settings/payments")] = {"card": {"gateway": "adyen"}}

        with pytest.raises(UnsupportedCombination):
            await orchestrator.tokenize({"card": {}})

    @pytest.mark.asyncio
    async def test_nothing_enabled_is_rejected_through_hook(self, orchestrator, api):
        errors = []
        api.routes[("get", "/settings/payments")] = {"card": {"gateway": "stripe"}}

        outcome = await orchestrator.tokenize({"klarna": {"on_error": errors.append}})

        assert isinstance(outcome, Failure)
        assert isinstance(errors[0], UnsupportedCombination)

    @pytest.mark.asyncio
    async def test_list_methods_is_memoized(self, orchestrator, api):
        first = await orchestrator.list_methods()
        second = await orchestrator.list_methods()
        refreshed = await orchestrator.list_methods(refresh=True)

        assert first is second
        assert refreshed is not first
        assert first.get("card").gateway == "stripe"
        assert len(api.calls_to("get", "/payment/methods")) == 2

    @pytest.mark.asyncio
    async def test_refresh_reloads_payment_settings(self, orchestrator, api):
        await orchestrator.create_elements({"klarna": {}})
        api.routes[("get", "/settings/payments")] = {"card": {"gateway": "stripe"}}
        errors = []

        await orchestrator.tokenize({"klarna": {"on_error": errors.append}}, refresh=True)

        assert len(api.calls_to("get", "/settings/payments")) == 2
        assert isinstance(errors[0], UnsupportedCombination)

    @pytest.mark.asyncio
    async def test_reset_forgets_mounted_elements(self, orchestrator, api, vault, stripe):
        await orchestrator.create_elements({"card": {}})

        orchestrator.reset()

        assert orchestrator.params is None
        assert orchestrator.context.elements.get("stripe") is None
        with pytest.raises(GatewayError) as excinfo:
            await orchestrator.tokenize({"card": {}})
        assert excinfo.value.code == "element_not_mounted"
        assert len(api.calls_to("get", "/settings/payments")) == 2

    @pytest.mark.asyncio
    async def test_intent_pass_through(self, orchestrator, vault):
        vault.routes[("put", "/intent")] = {"id": "pi_1", "status": "succeeded"}

        created = await orchestrator.create_intent({"gateway": "stripe", "intent": {}})
        updated = await orchestrator.update_intent({"gateway": "stripe", "intent": {"id": "pi_1"}})

        assert created.client_secret == "cs_1"
        assert updated.status == "succeeded"
