"""
Activity catalogs for the HIV execution report.

Each catalog maps an activity category (display label) to its ordered
activity lines.  The same activity can appear twice with a different
type of activity; the pair is what identifies a line.

``ACTIVITY_CATEGORIES`` fixes the category order and the short code used
to build row ids, so ids stay stable whatever the catalog contents.
"""

from __future__ import annotations

from typing import NamedTuple


class Activity(NamedTuple):
    activity: str
    type_of_activity: str


# (code, label) in report order.
ACTIVITY_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("hr", "Human Resources (HR)"),
    ("trc", "Travel Related Costs (TRC)"),
    ("hpe", "Health Products & Equipment (HPE)"),
    ("pa", "Program Administration Costs (PA)"),
)


HEALTH_CENTER_ACTIVITIES: dict[str, tuple[Activity, ...]] = {
    "Human Resources (HR)": (
        Activity("Provide salaries for health facilities staff (DHs, HCs)", "Salary"),
        Activity("Provide salaries for health facilities staff (DHs, HCs)", "Bonus 2023/2024"),
    ),
    "Travel Related Costs (TRC)": (
        Activity(
            "Conduct support group meeting at Health Facilities especially for adolescents and children",
            "Workshop",
        ),
        Activity("Conduct supervision from Health centers to CHWs", "Supervision"),
        Activity("Conduct home visit for lost to follow up", "Supervision"),
        Activity("Conduct sample transportation from Health centers to District Hospitals", "Transport"),
    ),
    "Health Products & Equipment (HPE)": (
        Activity(
            "Support to DHs and HCs to improve and maintain infrastructure standards",
            "Maintenance and Repair",
        ),
    ),
    "Program Administration Costs (PA)": (
        Activity("Provide running costs for DHs & HCs", "Running costs Communication"),
        Activity("Provide running costs for DHs & HCs", "Running costs Office Supplies"),
        Activity("Provide running costs for DHs & HCs", "Running cost Refreshments"),
        Activity("Provide running costs for DHs & HCs", "Running cost Transport for reporting"),
        Activity("Provide running costs for DHs & HCs", "Running costs Bank charges"),
    ),
}


HOSPITAL_ACTIVITIES: dict[str, tuple[Activity, ...]] = {
    "Human Resources (HR)": (
        Activity("Provide salaries for health facilities staff (DHs, HCs)", "Salary"),
        Activity("Provide bonus for 2023-24", "Bonus"),
        Activity("Provide performance bonuses for hospital staff", "Bonus"),
    ),
    "Travel Related Costs (TRC)": (
        Activity("Conduct outreach to provide HIV testing service in communities", "Campaign for HIV testing"),
        Activity("Conduct outreach VMMC provision at decentralized level", "Campaign"),
        Activity("Conduct district events related to WAD celebration", "Campaign"),
        Activity(
            "Conduct training of Peer educators for Negative partner of Sero-Discordant couples "
            "on HIV and AIDS and sexual health issues",
            "Training",
        ),
        Activity(
            "Conduct integrated clinical mentorship from District Hospital to Health centres "
            "to support Treat All and DSDM implementation",
            "Supervision",
        ),
        Activity("Conduct annual coordination meeting at district level", "Workshop"),
        Activity(
            "Conduct quarterly multidisciplinary team meeting (MDT). "
            "Participants are those not supported by other donor",
            "Workshop",
        ),
        Activity("Conduct quarterly multidisciplinary team meeting (MDT)", "Workshop"),
        Activity(
            "Conduct support group meeting at Health Facilities especially for adolescents "
            "and children and younger adults",
            "Meeting",
        ),
        Activity("Conduct home visit for lost to follow up", "Supervision"),
        Activity("Conduct supervision and DQA from District Hospitals to Health Centers", "Supervision"),
        Activity("Conduct sample transportation from District Hospitals to Referal hospitals/NRL", "Transport"),
    ),
    "Health Products & Equipment (HPE)": (
        Activity(
            "Support to DHs and HCs to improve and maintain infrastructure standards- Motor car Vehicles",
            "Maintenance",
        ),
    ),
    "Program Administration Costs (PA)": (
        Activity("National and sub-HIV databases", "Utilities"),
        Activity("Infrastructure and Equipment", "Communication"),
    ),
}
