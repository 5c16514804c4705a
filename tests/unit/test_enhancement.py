"""Tests for the rule-based transcript enhancement stages."""

import pytest

from sonoflow.enhancement import (
    PROCEDURE_SECTIONS,
    classify_section,
    compose_enhanced_text,
    detect_findings,
    enhance_transcript,
    extract_measurements,
    generate_suggestions,
    standardize_terms,
)
from sonoflow.enhancement.terms import _build_term_pattern
from sonoflow.models.enhancement import EnhancementRequest, FindingsResult


class TestStandardizeTerms:

    def test_english_phrases_become_abbreviations(self):
        assert standardize_terms("The left ventricle is dilated") == "The LV is dilated"
        assert standardize_terms("Mitral valve and aortic valve are normal") == "MV and AV are normal"

    def test_matching_is_case_insensitive(self):
        assert standardize_terms("LEFT VENTRICLE, Ejection Fraction 60%") == "LV, EF 60%"

    def test_inner_whitespace_may_vary(self):
        assert standardize_terms("left   ventricle") == "LV"

    def test_whole_words_only(self):
        assert standardize_terms("left ventricles") == "left ventricles"
        assert standardize_terms("bileft ventricle") == "bileft ventricle"

    def test_russian_and_armenian_phrases(self):
        assert standardize_terms("левый желудочек расширен") == "left ventricle (LV) расширен"
        assert standardize_terms("Фракция выброса 55%") == "ejection fraction (EF) 55%"
        assert standardize_terms("ձախ փորոք") == "left ventricle (LV)"

    @pytest.mark.parametrize("text", [
        "LV normal size, EF 55%, MV and TV competent",
        "RA, LA, AV, PV",
        "lv and ef",
    ])
    def test_canonical_abbreviations_are_left_alone(self, text):
        assert standardize_terms(text) == text

    def test_replacement_is_single_pass(self):
        # The canonical form contains "left ventricle" but is not rewritten again
        assert standardize_terms("левый желудочек") == "left ventricle (LV)"

    def test_unmatched_text_passes_through(self):
        text = "Pericardial effusion is small. Heart rate 72."
        assert standardize_terms(text) == text

    def test_longest_phrase_wins(self):
        pattern = _build_term_pattern({"valve": "V", "mitral valve": "MV"})
        assert pattern.search("the mitral valve").group(0) == "mitral valve"


class TestExtractMeasurements:

    def test_all_measurement_types(self):
        measurements = extract_measurements("EF 55%, BPD 8.5 cm, GA 32 weeks, HR 140 bpm")

        assert measurements == {
            "ejection_fraction": 55,
            "biparietal_diameter": 8.5,
            "gestational_age": 32,
            "heart_rate": 140,
        }
        assert isinstance(measurements["ejection_fraction"], int)
        assert isinstance(measurements["biparietal_diameter"], float)

    def test_absent_measurements_are_omitted(self):
        assert extract_measurements("LV is normal in size") == {}

    def test_first_mention_wins(self):
        assert extract_measurements("HR 140 bpm, repeat HR 150 bpm") == {"heart_rate": 140}

    def test_label_synonyms_and_connecting_words(self):
        measurements = extract_measurements("ejection fraction is 60 percent, heart rate: 72")
        assert measurements == {"ejection_fraction": 60, "heart_rate": 72}

    def test_value_after_standardized_multilingual_label(self):
        standardized = standardize_terms("фракция выброса 45%")
        assert extract_measurements(standardized) == {"ejection_fraction": 45}

    def test_russian_labels(self):
        assert extract_measurements("ЧСС 130 уд/мин, БПР 7.9 см") == {
            "heart_rate": 130,
            "biparietal_diameter": 7.9,
        }

    def test_label_must_be_a_whole_word(self):
        assert extract_measurements("GAP 5 mm, CHR 12") == {}

    def test_unit_is_optional(self):
        assert extract_measurements("GA 20") == {"gestational_age": 20}


class TestClassifySection:

    def test_section_name_in_text(self):
        assert classify_section("Mitral valve shows mild regurgitation", "echocardiogram") == "Mitral Valve"

    def test_section_name_without_space(self):
        assert classify_section("leftventricle looks fine", "echocardiogram") == "Left Ventricle"

    def test_first_configured_section_wins(self):
        text = "Right ventricle normal, left ventricle dilated"
        assert classify_section(text, "echocardiogram") == "Left Ventricle"

    def test_canonical_abbreviation_fallback(self):
        assert classify_section("The LV is dilated", "echocardiogram") == "Left Ventricle"
        assert classify_section("MV thickened", "echocardiogram") == "Mitral Valve"

    def test_multilingual_fallback(self):
        assert classify_section("правый желудочек в норме", "echocardiogram") == "Right Ventricle"
        assert classify_section("միտրալ", "echocardiogram") == "Mitral Valve"

    def test_other_procedures(self):
        assert classify_section("Placenta is anterior, grade 1", "obstetric-ultrasound") == "Placenta"
        assert classify_section("The liver is homogeneous", "abdominal-ultrasound") == "Liver"

    def test_fallback_only_returns_labels_of_the_procedure(self):
        assert classify_section("левый желудочек", "obstetric-ultrasound") is None
        assert classify_section("LV normal", "abdominal-ultrasound") is None

    def test_no_section(self):
        assert classify_section("Patient tolerated the procedure well", "echocardiogram") is None

    def test_unknown_procedure(self):
        assert classify_section("Left ventricle normal", "colonoscopy") is None

    @pytest.mark.parametrize("procedure_type", sorted(PROCEDURE_SECTIONS))
    @pytest.mark.parametrize("text", [
        "Left ventricle and liver and placenta",
        "LV RV LA RA MV AV TV PV",
        "левый желудочек, правый желудочек, митральный",
        "Fetal biometry: BPD 8.5 cm",
        "nothing relevant here",
    ])
    def test_result_is_a_configured_label(self, procedure_type, text):
        section = classify_section(text, procedure_type)
        assert section is None or section in PROCEDURE_SECTIONS[procedure_type]


class TestDetectFindings:

    def test_normal(self):
        findings = detect_findings("Everything appears normal and within normal limits")

        assert findings.normal
        assert not findings.abnormal
        assert not findings.no_evidence
        assert findings.findings == ("Normal findings",)

    def test_abnormal(self):
        findings = detect_findings("Abnormal findings with dilated left ventricle")

        assert findings.abnormal
        assert not findings.normal
        assert findings.findings == ("Abnormal findings detected",)

    def test_no_evidence(self):
        findings = detect_findings("No evidence of pericardial effusion")

        assert findings.no_evidence
        assert findings.findings == ("No significant pathology",)

    def test_checks_are_independent_and_ordered(self):
        findings = detect_findings("No evidence of thrombus. LA dilated. LV size normal.")

        assert findings.normal and findings.abnormal and findings.no_evidence
        assert findings.findings == (
            "Normal findings",
            "Abnormal findings detected",
            "No significant pathology",
        )

    def test_nothing_detected(self):
        assert detect_findings("Study performed at bedside") == FindingsResult()

    def test_to_dict(self):
        assert detect_findings("unremarkable").to_dict() == {
            "normal": True,
            "abnormal": False,
            "noEvidence": False,
            "findings": ["Normal findings"],
        }


class TestSuggestionsAndComposition:

    def test_suggestions_from_structured_outputs(self):
        findings = FindingsResult(abnormal=True, findings=("Abnormal findings detected",))

        assert generate_suggestions({"heart_rate": 72}, "Left Ventricle", findings) == [
            "✓ Measurements extracted automatically",
            "✓ Classified as: Left Ventricle",
            "⚠ Abnormal findings detected - review carefully",
        ]
        assert generate_suggestions({}, None, FindingsResult()) == []

    def test_compose_plain_text(self):
        assert compose_enhanced_text("Study performed", None, {}, FindingsResult()) == "Study performed"

    def test_compose_all_parts_in_order(self):
        findings = FindingsResult(normal=True, findings=("Normal findings",))
        enhanced = compose_enhanced_text(
            "BPD 8.5 cm, HR 140 bpm",
            "Fetal Biometry",
            {"biparietal_diameter": 8.5, "heart_rate": 140},
            findings,
        )

        assert enhanced == (
            "[Fetal Biometry]\nBPD 8.5 cm, HR 140 bpm"
            "\n\n📊 Detected measurements: biparietal diameter: 8.5, heart rate: 140"
            "\n\n📋 Normal findings"
        )


    def test_measurement_values_keep_every_digit(self):
        enhanced = compose_enhanced_text(
            "BPD 85.1234567 mm, EF 60.0%",
            None,
            {"biparietal_diameter": 85.1234567, "ejection_fraction": 60.0},
            FindingsResult(),
        )

        assert enhanced.endswith(
            "📊 Detected measurements: biparietal diameter: 85.1234567, ejection fraction: 60"
        )


class TestEnhanceTranscript:

    def test_full_pipeline(self):
        result = enhance_transcript(EnhancementRequest("Left ventricle is dilated, ejection fraction 35%"))

        assert result.standardized == "LV is dilated, EF 35%"
        assert result.measurements == {"ejection_fraction": 35}
        assert result.detected_section == "Left Ventricle"
        assert result.findings.abnormal
        assert result.suggestions == (
            "✓ Measurements extracted automatically",
            "✓ Classified as: Left Ventricle",
            "⚠ Abnormal findings detected - review carefully",
        )
        assert result.enhanced == (
            "[Left Ventricle]\nLV is dilated, EF 35%"
            "\n\n📊 Detected measurements: ejection fraction: 35"
            "\n\n📋 Abnormal findings detected"
        )

    def test_multilingual_obstetric(self):
        result = enhance_transcript(EnhancementRequest(
            "Плацента по передней стенке, БПР 8.2 см, ЧСС 142",
            procedure_type="obstetric-ultrasound",
            language="ru-RU",
        ))

        assert result.measurements == {"biparietal_diameter": 8.2, "heart_rate": 142}
        assert result.detected_section is None
        assert result.findings.findings == ()

    def test_deterministic(self):
        request = EnhancementRequest("MV thickened, no evidence of stenosis, HR 80 bpm")
        assert enhance_transcript(request) == enhance_transcript(request)
