from __future__ import annotations

from .models import LogicalTable, ModeConfig, TableSpec

DETAIL_PREFIX_HEADER = ["Application No", "Mode", "Row No"]

COMMON_MASTER_HEADER = [
    "Application No",
    "Timestamp",
    "Student Name",
    "Matric Number",
    "Student Phone",
    "Programme",
    "Supervisor Name",
    "Thesis Title",
    "Crush Date",
    "Concrete Type",
    "Cement Type",
    "Slump/Flow (mm)",
    "Age (days)",
    "No. of Cubes",
    "Target Strength (MPa)",
]

COMMON_MASTER_FIELDS = [
    "student_name",
    "matric_number",
    "student_phone",
    "programme",
    "supervisor_name",
    "thesis_title",
    "crush_date",
    "concrete_type",
    "cement_type",
    "slump",
    "age_days",
    "cubes_count",
    "target_strength",
]


def builtin_detail_tables() -> list[TableSpec]:
    return [
        TableSpec(
            logical=LogicalTable.FINE_AGGREGATE,
            aliases=["Research Fine Aggregates", "Fine Aggregates"],
            header=DETAIL_PREFIX_HEADER + ["Fine Aggregate Name", "Quantity", "Unit"],
            collection="fine_aggregates",
        ),
        TableSpec(
            logical=LogicalTable.COARSE_AGGREGATE,
            aliases=["Research Coarse Aggregates", "Coarse Aggregates"],
            header=DETAIL_PREFIX_HEADER + ["Coarse Aggregate Name", "Quantity", "Unit"],
            collection="coarse_aggregates",
        ),
        TableSpec(
            logical=LogicalTable.ADMIXTURE,
            aliases=["Research Admixtures", "Admixtures"],
            header=DETAIL_PREFIX_HEADER + ["Admixture Name", "Dosage (L/100kg cement)"],
            collection="admixtures",
        ),
        TableSpec(
            logical=LogicalTable.SCM,
            aliases=["Research SCMs", "SCMs", "Supplementary Cementitious Materials"],
            header=DETAIL_PREFIX_HEADER + ["SCM Name", "Percent (%)"],
            collection="scms",
        ),
    ]


def builtin_modes() -> list[ModeConfig]:
    return [
        ModeConfig(
            name="ratio",
            label="Ratio",
            prefix="UNILAG-CLR",
            master=TableSpec(
                logical=LogicalTable.MASTER_RECORD,
                aliases=["Research Master Sheet - Ratio", "Master Sheet - Ratio", "Ratio Master"],
                header=COMMON_MASTER_HEADER + ["Ratio Cement", "Ratio Water", "Mix Ratio", "Notes"],
            ),
            master_fields=COMMON_MASTER_FIELDS + ["ratio_cement", "ratio_water", "mix_ratio_string", "notes"],
            required_fields=["ratio_water"],
            defaults={"ratio_cement": 1},
        ),
        ModeConfig(
            name="kg",
            label="Kg/m3",
            prefix="UNILAG-CLK",
            spellings=["kg/m3", "kgm3", "kg/m³"],
            master=TableSpec(
                logical=LogicalTable.MASTER_RECORD,
                aliases=[
                    "Research Master Sheet - Kg/m3",
                    "Research Master Sheet - Kg/m³",
                    "Master Sheet - Kg/m3",
                    "Kg Master",
                ],
                header=COMMON_MASTER_HEADER
                + [
                    "Cement (kg/m3)",
                    "Water (kg/m3)",
                    "Fine Total (kg/m3)",
                    "Coarse Total (kg/m3)",
                    "W/C Ratio",
                    "Mix Ratio",
                    "Notes",
                ],
            ),
            master_fields=COMMON_MASTER_FIELDS
            + [
                "cement_content",
                "water_content",
                "fine_agg",
                "coarse_agg",
                "wc_ratio",
                "mix_ratio_string",
                "notes",
            ],
            required_fields=["cement_content", "water_content"],
        ),
    ]
