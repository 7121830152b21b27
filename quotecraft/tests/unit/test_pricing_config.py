import pytest
from decimal import Decimal

from quotecraft.core.config import Settings
from quotecraft.core.errors import ConfigInvalid
from quotecraft.services.pricing_config import PricingConfigStore


def test_defaults(config_store):
    config = config_store.get()
    assert config.base_fee == Decimal("75.0")
    assert config.tax_rate == Decimal("0.085")
    assert config.distance_tiers.tier2.rate == Decimal("1.5")
    assert config.additional_services["insurancePremium"] == Decimal("0.02")


def test_initial_snapshot_is_kept(pricing_config):
    store = PricingConfigStore(initial=pricing_config)
    assert store.get() is pricing_config


def test_update_swaps_snapshot(config_store):
    before = config_store.get()

    after = config_store.update({"baseFee": 100})

    assert after.base_fee == Decimal("100")
    assert config_store.get() is after
    assert before.base_fee == Decimal("75.0")


def test_snake_case_keys_accepted(config_store):
    config = config_store.update({"tax_rate": 0.1})
    assert config.tax_rate == Decimal("0.1")


def test_mapping_update_replaces_whole_value(config_store):
    config = config_store.update({"itemFees": {"small": 12}})
    assert config.item_fees == {"small": Decimal("12")}


def test_snapshot_is_immutable(config_store):
    config = config_store.get()
    with pytest.raises(Exception):
        config.base_fee = Decimal("1")


@pytest.mark.parametrize("partial,field", [
    ({"baseFee": -1}, "baseFee"),
    ({"taxRate": 1.5}, "taxRate"),
    ({"emergencyUrgencyMultiplier": 0.5}, "emergencyUrgencyMultiplier"),
    ({"itemFees": {"small": -5}}, "itemFees.small"),
    ({"complexityFactors": {"multiVenue": 0.9}}, "complexityFactors.multiVenue"),
])
def test_invalid_values_rejected(config_store, partial, field):
    before = config_store.get()

    with pytest.raises(ConfigInvalid) as exc:
        config_store.update(partial)

    assert exc.value.reason == field
    assert config_store.get() is before


def test_tier_order_enforced(config_store):
    before = config_store.get()
    tiers = {
        "tier1": {"maxMiles": 60, "rate": 0},
        "tier2": {"maxMiles": 50, "rate": 1.5},
        "tier3": {"rate": 2},
    }

    with pytest.raises(ConfigInvalid) as exc:
        config_store.update({"distanceTiers": tiers})

    assert exc.value.reason == "distanceTiers"
    assert config_store.get() is before


def test_unknown_key_rejected(config_store):
    with pytest.raises(ConfigInvalid) as exc:
        config_store.update({"baseFees": 100})
    assert exc.value.reason == "baseFees"


def test_reset(config_store):
    config_store.update({"baseFee": 100})
    config = config_store.reset()
    assert config.base_fee == Decimal("75.0")


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("BASE_DELIVERY_FEE", "80")
    monkeypatch.setenv("TAX_RATE", "0.07")
    monkeypatch.setenv("EMERGENCY_BASE_FEE", "200")

    store = PricingConfigStore(settings=Settings(_env_file=None))
    config = store.get()

    assert config.base_fee == Decimal("80.0")
    assert config.tax_rate == Decimal("0.07")
    assert config.service_levels["emergency"] == Decimal("200.0")
