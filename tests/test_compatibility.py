import itertools
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from pcforge.engine import Applicable, Inapplicable, PowerAssessment, check_memory, check_power, check_socket, evaluate
from pcforge.errors import InvalidInput
from pcforge.schemas import CompatibilityReport


def test_matching_sockets_produce_no_socket_error(make_part):
    cpu = make_part("CPU", socket="LGA1700")
    board = make_part("Motherboard", socket="LGA1700")

    outcome = check_socket(cpu, board)
    assert isinstance(outcome, Applicable)
    assert outcome.compatible is True
    assert outcome.message == "Compatible sockets (LGA1700)"

    report = evaluate([cpu, board])
    assert report.errors == ()
    assert report.is_compatible is True


def test_socket_mismatch_is_a_single_error(make_part):
    report = evaluate([make_part("CPU", socket="AM5"), make_part("Motherboard", socket="LGA1700")])

    assert report.errors == ("CPU socket (AM5) is not compatible with motherboard socket (LGA1700)",)
    assert report.is_compatible is False


def test_socket_comparison_is_case_sensitive(make_part):
    outcome = check_socket(make_part("CPU", socket="am5"), make_part("Motherboard", socket="AM5"))
    assert isinstance(outcome, Applicable)
    assert outcome.compatible is False


def test_socket_rule_skipped_without_data(make_part):
    board = make_part("Motherboard", socket="AM5")
    assert isinstance(check_socket(None, board), Inapplicable)
    assert isinstance(check_socket(make_part("CPU", socket=""), board), Inapplicable)
    assert isinstance(check_socket(make_part("CPU"), board), Inapplicable)

    report = evaluate([make_part("CPU"), board])
    assert report.errors == ()


def test_memory_type_mismatch_short_circuits_speed_and_capacity(make_part):
    ram = make_part("RAM", type="DDR5", speed=6000, capacity=256)
    board = make_part("Motherboard", memoryType="DDR4", maxMemorySpeed=3200, maxMemory="64GB")

    report = evaluate([ram, board])

    assert report.errors == ("RAM type (DDR5) is not compatible with motherboard memory type (DDR4)",)
    assert report.warnings == ()
    assert report.is_compatible is False


def test_memory_speed_above_board_maximum_is_a_warning(make_part):
    ram = make_part("RAM", type="DDR5", speed=6000, capacity=32)
    board = make_part("Motherboard", memoryType="DDR5", maxMemorySpeed=5600, maxMemory="128GB")

    report = evaluate([ram, board])

    assert report.warnings == ("RAM speed (6000 MHz) exceeds motherboard maximum (5600 MHz)",)
    assert report.errors == ()
    assert report.is_compatible is True


def test_memory_capacity_above_board_maximum_is_a_warning(make_part):
    ram = make_part("RAM", type="DDR4", capacity=256)
    board = make_part("Motherboard", memoryType="DDR4", maxMemory="128GB")

    outcome = check_memory(ram, board)

    assert isinstance(outcome, Applicable)
    assert outcome.compatible is True
    assert outcome.warnings == ("RAM capacity (256GB) exceeds motherboard maximum (128GB)",)


def test_memory_rule_accepts_string_numbers(make_part):
    ram = make_part("RAM", type="DDR5", speed="6400 MHz")
    board = make_part("Motherboard", memoryType="DDR5", maxMemorySpeed="6000")

    outcome = check_memory(ram, board)
    assert outcome.warnings == ("RAM speed (6400 MHz) exceeds motherboard maximum (6000 MHz)",)


def test_memory_rule_skipped_without_type(make_part):
    outcome = check_memory(make_part("RAM", speed=6000), make_part("Motherboard", memoryType="DDR5"))
    assert isinstance(outcome, Inapplicable)


def _power_build(make_part, wattage):
    return [
        make_part("CPU", tdp=125),
        make_part("GPU", recommendedPSU=700),
        make_part("Motherboard"),
        make_part("RAM"),
        make_part("PSU", wattage=wattage),
    ]


def test_insufficient_psu_is_an_error(make_part):
    report = evaluate(_power_build(make_part, 550))

    assert report.total_power_draw == 725
    assert report.recommended_wattage == 870
    assert report.errors == ("PSU wattage (550W) insufficient for estimated power draw (725W)",)
    assert report.is_compatible is False


def test_psu_below_headroom_is_a_warning(make_part):
    report = evaluate(_power_build(make_part, 800))

    assert report.errors == ()
    assert report.warnings == ("PSU wattage (800W) below recommended (870W for 20% headroom)",)
    assert report.is_compatible is True


def test_psu_with_headroom_passes(make_part):
    components = _power_build(make_part, 870)
    outcome = check_power(components, components[-1])

    assert isinstance(outcome, PowerAssessment)
    assert outcome.compatible is True
    assert outcome.errors == () and outcome.warnings == ()


def test_psu_without_wattage_is_inapplicable(make_part):
    psu = make_part("PSU")
    assert isinstance(check_power([psu], psu), Inapplicable)

    report = evaluate([make_part("CPU", tdp=500), psu])
    assert report.errors == ()
    assert report.total_power_draw is None
    assert report.recommended_wattage is None


def test_empty_selection_only_recommends():
    report = evaluate([])

    assert report.is_compatible is True
    assert report.errors == ()
    assert report.warnings == ()
    assert report.component_count == 0
    assert list(report.recommendations) == [
        "Add storage (SSD/HDD) to complete your build",
        "Select a PC case to house your components",
        "Add a power supply unit (PSU) to power your system",
    ]


def test_cooler_recommended_only_with_cpu(make_part):
    with_cpu = evaluate([make_part("CPU")])
    assert "Add a CPU cooler for proper thermal management" in with_cpu.recommendations

    with_cooler = evaluate([make_part("CPU"), make_part("Cooling")])
    assert "Add a CPU cooler for proper thermal management" not in with_cooler.recommendations


def test_duplicate_category_uses_last_component_for_rules(make_part):
    board = make_part("Motherboard", socket="LGA1700")
    amd = make_part("CPU", socket="AM5", tdp=100)
    intel = make_part("CPU", socket="LGA1700", tdp=100)
    psu = make_part("PSU", wattage=1000)

    last_intel = evaluate([amd, intel, board, psu])
    assert last_intel.errors == ()
    # 两颗 CPU 都计入功耗 - both CPUs count towards power
    assert last_intel.total_power_draw == 50 + 100 + 100 + 50

    last_amd = evaluate([intel, amd, board, psu])
    assert last_amd.errors == ("CPU socket (AM5) is not compatible with motherboard socket (LGA1700)",)


def test_rules_report_in_fixed_order(make_part):
    components = [
        make_part("PSU", wattage=300),
        make_part("RAM", type="DDR5"),
        make_part("Motherboard", socket="LGA1700", memoryType="DDR4"),
        make_part("CPU", socket="AM5", tdp=125),
        make_part("GPU", powerConsumption=320),
    ]
    expected = (
        "CPU socket (AM5) is not compatible with motherboard socket (LGA1700)",
        "RAM type (DDR5) is not compatible with motherboard memory type (DDR4)",
        "PSU wattage (300W) insufficient for estimated power draw (555W)",
    )

    for ordering in itertools.permutations(components):
        report = evaluate(list(ordering))
        assert report.errors == expected
        assert list(report.recommendations) == [
            "Add storage (SSD/HDD) to complete your build",
            "Select a PC case to house your components",
            "Add a CPU cooler for proper thermal management",
        ]


def test_evaluate_is_idempotent(make_part):
    components = _power_build(make_part, 800)
    first = evaluate(components)
    second = evaluate(components)

    assert first.model_dump(exclude={"checked_at"}) == second.model_dump(exclude={"checked_at"})


def test_evaluate_accepts_plain_mappings():
    report = evaluate(
        [
            {"componentId": "c1", "category": "CPU", "specifications": {"socket": "AM5"}},
            {"componentId": "m1", "category": "Motherboard", "specifications": {"socket": "AM4"}},
        ]
    )
    assert report.component_count == 2
    assert report.is_compatible is False


@pytest.mark.parametrize("bad", [None, "CPU", b"CPU", {"components": []}, 42, [1], [{"category": "CPU"}]])
def test_malformed_input_raises_invalid_input(bad):
    with pytest.raises(InvalidInput):
        evaluate(bad)


def test_report_payload_uses_camel_case_and_is_frozen(make_part):
    report = evaluate([])
    payload = report.to_payload()

    assert payload["isCompatible"] is True
    assert payload["componentCount"] == 0
    assert "checkedAt" in payload
    assert "totalPowerDraw" not in payload

    with pytest.raises(ValidationError):
        report.is_compatible = False


@pytest.mark.parametrize("tdp", [10**400, "9" * 400, float("inf")])
def test_out_of_range_values_fall_back_to_defaults(make_part, tdp):
    report = evaluate([make_part("CPU", tdp=tdp), make_part("PSU", wattage=850)])

    # 65 W 默认 CPU 功耗 + 50 W 系统开销
    assert report.total_power_draw == 115
    assert report.recommended_wattage == 138
    assert report.is_compatible is True


def test_huge_finite_draws_still_produce_totals(make_part):
    report = evaluate(
        [
            make_part("CPU", tdp=1e308),
            make_part("CPU", tdp=1e308),
            make_part("PSU", wattage=850),
        ]
    )

    assert isinstance(report.total_power_draw, int)
    assert isinstance(report.recommended_wattage, int)
    assert report.total_power_draw > 10**308
    assert report.is_compatible is False


def test_socket_whitespace_is_not_trimmed(make_part):
    outcome = check_socket(make_part("CPU", socket=" AM5"), make_part("Motherboard", socket="AM5"))

    assert isinstance(outcome, Applicable)
    assert outcome.compatible is False


def test_report_message_lists_are_immutable(make_part):
    report = evaluate([make_part("CPU", socket="AM5"), make_part("Motherboard", socket="AM4")])

    assert isinstance(report.errors, tuple)
    assert isinstance(report.warnings, tuple)
    assert isinstance(report.recommendations, tuple)
    with pytest.raises(AttributeError):
        report.errors.append("x")


@pytest.mark.parametrize(
    "is_compatible, errors",
    [(True, ["PSU wattage (300W) insufficient for estimated power draw (555W)"]), (False, [])],
)
def test_report_rejects_verdict_that_contradicts_errors(is_compatible, errors):
    with pytest.raises(ValidationError):
        CompatibilityReport(
            is_compatible=is_compatible,
            errors=errors,
            checked_at=datetime.now(timezone.utc),
        )
