"""Maps free-text expense categories to the Anlage V cost groups."""

GRUNDSTEUER = "Grundsteuer"
VERSICHERUNGEN = "Versicherungen"
VERWALTUNGSKOSTEN = "Verwaltungskosten"
INSTANDHALTUNG = "Instandhaltung / Reparatur"
SCHULDZINSEN = "Schuldzinsen"
BETRIEBSKOSTEN = "Betriebskosten"
FAHRTKOSTEN = "Fahrtkosten"
SONSTIGES = "Sonstiges"

# Form order
ANLAGE_V_GROUPS = (
    GRUNDSTEUER,
    VERSICHERUNGEN,
    VERWALTUNGSKOSTEN,
    INSTANDHALTUNG,
    SCHULDZINSEN,
    BETRIEBSKOSTEN,
    FAHRTKOSTEN,
    SONSTIGES,
)

# Known category names, checked in order as case-insensitive substrings;
# first hit wins ("Heizungswartung" is maintenance). Insurance is limited to
# building and landlord policies, so "Kfz-Versicherung" stays Sonstiges.
EXPENSE_GROUP_RULES: tuple[tuple[str, str], ...] = (
    ("grundsteuer", GRUNDSTEUER),
    ("versicherungen", VERSICHERUNGEN),
    ("gebäudeversicherung", VERSICHERUNGEN),
    ("wohngebäudeversicherung", VERSICHERUNGEN),
    ("haftpflichtversicherung", VERSICHERUNGEN),
    ("hausratversicherung", VERSICHERUNGEN),
    ("elementarversicherung", VERSICHERUNGEN),
    ("rechtsschutzversicherung", VERSICHERUNGEN),
    ("glasversicherung", VERSICHERUNGEN),
    ("mietausfallversicherung", VERSICHERUNGEN),
    ("zinsen", SCHULDZINSEN),
    ("hausverwaltung", VERWALTUNGSKOSTEN),
    ("verwaltung", VERWALTUNGSKOSTEN),
    ("steuerberatung", VERWALTUNGSKOSTEN),
    ("buchhaltung", VERWALTUNGSKOSTEN),
    ("kontoführungsgebühren", VERWALTUNGSKOSTEN),
    ("reparaturen", INSTANDHALTUNG),
    ("wartung", INSTANDHALTUNG),
    ("instandhaltung", INSTANDHALTUNG),
    ("sanierung", INSTANDHALTUNG),
    ("renovierung", INSTANDHALTUNG),
    ("modernisierung", INSTANDHALTUNG),
    ("handwerkerkosten", INSTANDHALTUNG),
    ("fahrtkosten", FAHRTKOSTEN),
    ("wasser", BETRIEBSKOSTEN),
    ("strom", BETRIEBSKOSTEN),
    ("gas", BETRIEBSKOSTEN),
    ("heizung", BETRIEBSKOSTEN),
    ("müllabfuhr", BETRIEBSKOSTEN),
    ("straßenreinigung", BETRIEBSKOSTEN),
    ("schornsteinfeger", BETRIEBSKOSTEN),
    ("hauswart", BETRIEBSKOSTEN),
    ("gartenpflege", BETRIEBSKOSTEN),
    ("aufzug", BETRIEBSKOSTEN),
    ("gebäudereinigung", BETRIEBSKOSTEN),
    ("kabelanschluss", BETRIEBSKOSTEN),
    ("winterdienst", BETRIEBSKOSTEN),
)


def classify_expense(category_name: str | None) -> str:
    """Anlage V group for a category name; Sonstiges when nothing matches."""
    if not category_name:
        return SONSTIGES
    name = category_name.lower()
    for keyword, group in EXPENSE_GROUP_RULES:
        if keyword in name:
            return group
    return SONSTIGES
