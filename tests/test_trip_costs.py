import pytest

from schemas import Passenger
from services.itinerary_generator import generate_trip_plan
from services.trip_costs import toggle_item, total_cost


@pytest.fixture
def plan(paris_tokyo, sequential_ids):
    return generate_trip_plan(paris_tokyo, sequential_ids)


def _flags(plan):
    flags = {
        "outboundFlight": plan.outbound_flight.included,
        "returnFlight": plan.return_flight.included,
        "carRental": plan.car_rental.included,
        "hotel": plan.hotel.included,
    }
    for day in plan.itinerary:
        for item in day.items:
            flags[item.id] = item.included
    return flags


def test_excluding_car_drops_its_total(plan):
    passengers = Passenger(adults=2)
    before = total_cost(plan, passengers)

    toggled = toggle_item(plan, "carRental")

    assert toggled.car_rental.included is False
    assert total_cost(toggled, passengers) == before - 520


def test_car_and_hotel_are_not_per_traveler(plan):
    one = total_cost(plan, Passenger(adults=1))
    without = toggle_item(toggle_item(plan, "carRental"), "hotel")

    assert one - total_cost(without, Passenger(adults=1)) == 520 + 1750
    assert total_cost(plan, Passenger(adults=3)) - total_cost(without, Passenger(adults=3)) == 520 + 1750


def test_children_and_infants_pay_adult_rate(plan):
    family = Passenger(adults=1, children=1, infants=1)

    assert total_cost(plan, family) == total_cost(plan, Passenger(adults=3))


def test_toggle_twice_restores_plan(plan):
    item_id = plan.itinerary[2].items[1].id

    for kind, ident in [("outboundFlight", None), ("hotel", None), ("itinerary", item_id)]:
        assert toggle_item(toggle_item(plan, kind, ident), kind, ident) == plan


def test_toggle_changes_only_the_target(plan):
    item_id = plan.itinerary[3].items[0].id
    before = _flags(plan)

    after = _flags(toggle_item(plan, "itinerary", item_id))

    changed = [key for key in before if before[key] != after[key]]
    assert changed == [item_id]


def test_toggle_leaves_original_untouched(plan):
    snapshot = plan.model_copy(deep=True)

    toggle_item(plan, "returnFlight")
    toggle_item(plan, "itinerary", plan.itinerary[1].items[0].id)

    assert plan == snapshot


def test_singleton_ignores_item_id(plan):
    toggled = toggle_item(plan, "hotel", "whatever")

    assert toggled.hotel.included is False


@pytest.mark.parametrize("kind,ident", [
    ("spaceship", None),
    ("itinerary", "no-such-id"),
    ("itinerary", None),
])
def test_unknown_targets_are_noops(plan, kind, ident):
    assert toggle_item(plan, kind, ident) is plan


def test_missing_singleton_is_noop(paris_tokyo, sequential_ids):
    details = paris_tokyo.model_copy(update={"include_car_rental": False})
    plan = generate_trip_plan(details, sequential_ids)

    assert toggle_item(plan, "carRental") is plan


def test_total_ignores_cached_value(plan):
    stale = plan.model_copy(update={"total_cost": 1})

    assert total_cost(stale, Passenger(adults=2)) == 5748


def test_excluded_activity_cost_not_counted(plan):
    dinner = plan.itinerary[0].items[-1]
    assert dinner.cost == 75

    toggled = toggle_item(plan, "itinerary", dinner.id)

    assert total_cost(plan, Passenger(adults=2)) - total_cost(toggled, Passenger(adults=2)) == 150
