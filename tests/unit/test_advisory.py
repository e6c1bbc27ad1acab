"""
Unit Tests for the Advisory Engine

Covers rule ordering, severities, and the anticoagulation, acid-base and
metabolic branches.
"""
import pytest

from crrt_advisor.core import AnticoagulationMode, CircuitParameters
from crrt_advisor.core.advisory import Advisory, AdvisoryEngine, AdvisorySeverity
from crrt_advisor.core.advisory.rules_clinical import NORMAL_TEXT as CLINICAL_NORMAL
from crrt_advisor.core.advisory.rules_pressure import NORMAL_TEXT as PRESSURE_NORMAL


@pytest.fixture
def engine() -> AdvisoryEngine:
    return AdvisoryEngine()


def _ids(advisories):
    return [a.rule_id for a in advisories]


class TestPressureAdvisory:
    """Tests for the circuit pressure panel."""

    def test_normal_pressures(self, engine, quiet_params):
        report = engine.analyze(quiet_params)

        assert report.pressure_text == PRESSURE_NORMAL
        assert not report.pressure_warning

    def test_arterial_only_scenario(self, engine):
        params = CircuitParameters(p_arterial=-160, p_venous=100, p_pre_filter=140, tmp=30)
        report = engine.analyze(params)

        assert _ids(report.pressure) == ["PRS-ART-001"]
        assert "\n" not in report.pressure_text
        assert report.pressure_warning

    def test_all_rules_fire_in_order(self, engine):
        params = CircuitParameters(p_arterial=-200, p_venous=200, p_pre_filter=400, tmp=250)
        report = engine.analyze(params)

        assert _ids(report.pressure) == [
            "PRS-ART-001", "PRS-VEN-001", "PRS-TMP-001", "PRS-DROP-001",
        ]
        assert len(report.pressure_text.split("\n")) == 4

    def test_pressure_drop_reports_value(self, engine):
        params = CircuitParameters(p_pre_filter=300, p_venous=100)
        report = engine.analyze(params)

        assert _ids(report.pressure) == ["PRS-DROP-001"]
        assert "200 mmHg" in report.pressure_text
        assert report.pressure[0].severity == AdvisorySeverity.CRITICAL


class TestAnticoagulationAdvisory:
    """Tests for anticoagulation-mode rules."""

    def test_normal_range(self, engine, quiet_params):
        report = engine.analyze(quiet_params)

        assert report.clinical_text == CLINICAL_NORMAL
        assert not report.is_warning

    def test_no_anticoagulation(self, engine):
        report = engine.analyze(CircuitParameters(anticoagulation=AnticoagulationMode.NONE))

        assert _ids(report.clinical) == ["ACG-NONE-001"]
        assert report.clinical[0].severity == AdvisorySeverity.CRITICAL

    def test_heparin_under_anticoagulated(self, engine, default_params):
        report = engine.analyze(default_params)
        assert _ids(report.clinical) == ["ACG-HEP-001"]
        assert report.is_warning

    def test_heparin_over_anticoagulated(self, engine):
        report = engine.analyze(CircuitParameters(aptt=120))
        assert _ids(report.clinical) == ["ACG-HEP-002"]

    def test_heparin_rules_silent_in_other_modes(self, engine):
        params = CircuitParameters(anticoagulation=AnticoagulationMode.NAFAMOSTAT, aptt=20)
        assert engine.analyze(params).clinical_text == CLINICAL_NORMAL

    def test_citrate_dose_low_scenario(self, engine, citrate_params):
        report = engine.analyze(citrate_params)

        assert _ids(report.clinical) == ["RCA-DOSE-001"]
        assert "1.6" in report.clinical_text

    def test_citrate_checks_are_independent(self, engine):
        params = CircuitParameters(
            anticoagulation=AnticoagulationMode.CITRATE_CA,
            citrate_flow=100,
            post_filter_ca=0.5,
            peripheral_ca=0.8,
            total_ca=2.25,
        )
        report = engine.analyze(params)

        assert _ids(report.clinical) == [
            "RCA-DOSE-001", "RCA-POSTCA-001", "RCA-SYSCA-001", "RCA-RATIO-001",
        ]
        assert "2.8" in report.clinical[-1].text

    def test_citrate_rules_silent_under_heparin(self, engine):
        params = CircuitParameters(
            aptt=70, citrate_flow=10, post_filter_ca=0.9, peripheral_ca=0.5,
        )
        assert engine.analyze(params).clinical_text == CLINICAL_NORMAL

    def test_adequate_citrate_dose(self, engine):
        params = CircuitParameters(anticoagulation=AnticoagulationMode.CITRATE_CA, citrate_flow=265)
        assert engine.analyze(params).clinical_text == CLINICAL_NORMAL


class TestAcidBaseAdvisory:
    """Tests for blood-gas interpretation."""

    def test_mixed_acidosis_without_citrate(self, engine):
        params = CircuitParameters(aptt=70, ph=7.30, pco2=50, hco3=20)
        report = engine.analyze(params)

        assert _ids(report.clinical) == ["ABG-ACID-001"]
        text = report.clinical_text
        assert "[Acidosis] pH 7.3." in text
        assert "Respiratory (pCO2 50) + Metabolic (HCO3 20)" in text
        assert "buffer" in text
        assert "ventilator" in text
        assert "citrate accumulation" not in text

    def test_metabolic_acidosis_from_base_excess(self, engine):
        params = CircuitParameters(aptt=70, ph=7.30, be=-5)
        text = engine.analyze(params).clinical_text

        assert "Metabolic" in text
        assert "Respiratory" not in text

    def test_citrate_accumulation_acidosis(self, engine):
        params = CircuitParameters(
            anticoagulation=AnticoagulationMode.CITRATE_CA,
            citrate_flow=265, ph=7.25, hco3=18, lactate=5,
        )
        report = engine.analyze(params)

        assert _ids(report.clinical) == ["ABG-ACID-001", "MET-LAC-001"]
        acid = report.clinical[0]
        assert "citrate accumulation" in acid.text
        assert acid.severity == AdvisorySeverity.CRITICAL

    def test_citrate_accumulation_from_calcium_ratio(self, engine):
        params = CircuitParameters(
            anticoagulation=AnticoagulationMode.CITRATE_CA,
            citrate_flow=265, ph=7.25, hco3=18, lactate=1.2,
            total_ca=3.0, peripheral_ca=1.0,
        )
        report = engine.analyze(params)
        ids = _ids(report.clinical)

        assert ids.index("RCA-RATIO-001") < ids.index("ABG-ACID-001")
        acid = report.clinical[ids.index("ABG-ACID-001")]
        assert "citrate accumulation" in acid.text
        assert acid.severity == AdvisorySeverity.CRITICAL

    def test_high_ratio_ignored_without_total_calcium(self, engine):
        params = CircuitParameters(
            anticoagulation=AnticoagulationMode.CITRATE_CA,
            citrate_flow=265, ph=7.25, hco3=18, lactate=1.2,
            total_ca=3.0, peripheral_ca=1.0, has_total_ca=False,
        )
        report = engine.analyze(params)

        assert _ids(report.clinical) == ["ABG-ACID-001"]
        assert "buffer" in report.clinical_text
        assert "citrate accumulation" not in report.clinical_text

    def test_citrate_acidosis_without_accumulation_signs(self, engine):
        params = CircuitParameters(
            anticoagulation=AnticoagulationMode.CITRATE_CA,
            citrate_flow=265, ph=7.25, hco3=18,
        )
        text = engine.analyze(params).clinical_text
        assert "buffer" in text
        assert "citrate accumulation" not in text

    def test_metabolic_alkalosis_with_citrate(self, engine):
        params = CircuitParameters(
            anticoagulation=AnticoagulationMode.CITRATE_CA,
            citrate_flow=265, ph=7.50, hco3=30,
        )
        text = engine.analyze(params).clinical_text
        assert "[Alkalosis]" in text
        assert "reduce citrate or blood flow" in text

    def test_metabolic_alkalosis_without_citrate(self, engine):
        params = CircuitParameters(aptt=70, ph=7.50, be=5)
        text = engine.analyze(params).clinical_text
        assert "replacement fluid formula" in text

    def test_respiratory_alkalosis(self, engine):
        params = CircuitParameters(aptt=70, ph=7.50, pco2=30)
        report = engine.analyze(params)

        assert _ids(report.clinical) == ["ABG-ALK-001"]
        assert "Respiratory (pCO2 30)" in report.clinical_text
        assert "Advice" not in report.clinical_text

    @pytest.mark.parametrize("ph", [7.35, 7.40, 7.45])
    def test_normal_ph_band(self, engine, ph):
        params = CircuitParameters(aptt=70, ph=ph, pco2=60, hco3=15)
        assert engine.analyze(params).clinical_text == CLINICAL_NORMAL

    def test_high_lactate_independent_of_ph(self, engine):
        report = engine.analyze(CircuitParameters(aptt=70, lactate=5))

        assert _ids(report.clinical) == ["MET-LAC-001"]
        assert report.clinical_warning


class TestEngine:
    """Tests for the rule table mechanics."""

    def test_deterministic(self, engine):
        params = CircuitParameters(anticoagulation=AnticoagulationMode.NONE, ph=7.2, tmp=250)
        assert engine.analyze(params) == engine.analyze(params)

    def test_custom_rule_table(self, quiet_params):
        def rule_always(ctx):
            return Advisory(rule_id="TEST-001", text="always", severity=AdvisorySeverity.INFO)

        engine = AdvisoryEngine(pressure_rules=[rule_always], clinical_rules=[rule_always])
        report = engine.analyze(quiet_params)

        assert report.pressure_text == "always"
        assert not report.is_warning

    def test_empty_rule_tables_stay_empty(self, default_params):
        engine = AdvisoryEngine(pressure_rules=[], clinical_rules=[])
        report = engine.analyze(default_params)

        assert report.pressure_text == PRESSURE_NORMAL
        assert report.clinical_text == CLINICAL_NORMAL
        assert not report.is_warning

    def test_report_serialisation(self, engine, default_params):
        data = engine.analyze(default_params).to_dict()

        assert set(data) >= {"pressure", "clinical", "is_warning", "items"}
        assert data["items"]["clinical"][0]["severity"] == "warning"
