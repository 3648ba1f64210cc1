"""
Example surveys.

Two realistic declarations exercising every question kind:

    JobApplication  text, masked, multiline, paths, bounds, nested records,
                    unit/newtype/struct cases, multi-select, cross-field rules
    SandwichOrder   enums, nested unions, multi-select with a budget rule,
                    optional fields and a whole-order rule

They double as documentation and as fixtures for the test-suite.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional

from surveyform.declarations import Int32, UInt8, UInt32, ask, one_of, survey

# =========================================================================
# VALIDATORS
# =========================================================================


def validate_email(value, responses):
    email = value.value
    if "@" not in email or "." not in email.rsplit("@", 1)[-1]:
        return "Enter a valid email (e.g., you@example.com)"
    return None


def validate_password(value, responses):
    if len(value.value) < 6:
        return "Password must be at least 6 characters"
    return None


def validate_cover_letter(value, responses):
    words = value.value.split()
    if len(words) < 10:
        return f"Write at least 10 words ({len(words)} so far)"
    return None


def validate_skills(value, responses):
    picks = value.value
    if not picks:
        return "Select at least one skill"
    if len(picks) > 5:
        return "Select at most 5 skills"
    return None


MAX_TOTAL_COMP = 250


def validate_salary(value, responses):
    """Base plus bonus must stay within MAX_TOTAL_COMP ($k). Runs on every Salary field."""
    total = value.value
    for name in ("base", "bonus"):
        if name in responses:
            total += responses.get_int(name)
    if total > MAX_TOTAL_COMP:
        return f"Total comp ${total}k exceeds ${MAX_TOTAL_COMP}k limit"
    return None


# =========================================================================
# JOB APPLICATION
# =========================================================================


class FocusArea(Enum):
    BACKEND = "Backend"
    FRONTEND = "Frontend"
    FULLSTACK = "Fullstack"
    INFRASTRUCTURE = "Infrastructure"
    SECURITY = "Security"
    DATA = "Data"


class WorkStyle(Enum):
    REMOTE = "Remote"
    HYBRID = "Hybrid"
    ON_SITE = "On site"


class JobSkill(Enum):
    RUST = "Rust"
    PYTHON = "Python"
    TYPESCRIPT = "TypeScript"
    GO = "Go"
    SQL = "SQL"
    DOCKER = "Docker"
    KUBERNETES = "Kubernetes"
    AWS = "AWS"
    LEADERSHIP = "Leadership"
    COMMUNICATION = "Communication"


@one_of
class Position:
    """Position applied for: unit, newtype and struct-like cases."""


@dataclass
class Junior(Position):
    pass


@dataclass
class Senior(Position):
    pass


@dataclass
class TechLead(Position, newtype=True):
    team_size: UInt8 = ask("Team size you'd manage:")


@dataclass
class Staff(Position):
    focus: FocusArea = ask("Primary focus area:")
    years_at_level: UInt32 = ask("Years of staff+ experience:", min=0, max=30)


@dataclass
class OtherRole(Position, label="Other"):
    title: str = ask("Role title:")
    level: UInt8 = ask("Level (1-10):", min=1, max=10)


@one_of
class Referral:
    """How did you hear about us?"""


@dataclass
class LinkedIn(Referral, label="LinkedIn"):
    pass


@dataclass
class JobBoard(Referral):
    pass


@dataclass
class Referred(Referral, newtype=True, label="Referral"):
    name: str = ask("Who referred you?")


@dataclass
class Conference(Referral):
    name: str = ask("Conference name:")
    year: UInt32 = ask("Year:", min=2020, max=2030)


@dataclass
class Experience:
    company: str = ask("Company name:")
    months: UInt32 = ask("Months at company:", min=1, max=600)
    remote: bool = ask("Was this a remote position?")


@survey(validate_fields=validate_salary)
@dataclass
class Salary:
    base: UInt32 = ask("Base salary ($k/year):", min=30, max=200)
    bonus: UInt32 = ask("Expected bonus ($k/year):", min=0, max=100)


@survey(
    prelude="Welcome to Acme Corp!\nLet's get your application started.",
    epilogue="Application submitted! We'll be in touch within 5 business days.",
)
@dataclass
class JobApplication:
    name: str = ask("Full name:")
    email: str = ask("Email address:", validate=validate_email)
    password: str = ask("Create a portal password:", mask=True, validate=validate_password)
    position: Position = ask("Position applying for:")
    work_style: WorkStyle = ask("Preferred work style:")
    referral: Referral = ask("How did you hear about us?")
    experience: Experience = ask("Most recent experience:")
    salary: Salary = ask("Salary expectations:")
    skills: List[JobSkill] = ask("Your top skills (1-5):", validate=validate_skills)
    schools_attended: List[str] = ask("Schools attended (comma-separated):")
    cover_letter: str = ask("Cover letter:", multiline=True, validate=validate_cover_letter)
    resume: Path = ask("Resume file path:")
    relocate: bool = ask("Willing to relocate?")
    timezone: Int32 = ask("Timezone offset from UTC (-12 to +14):", min=-12, max=14)


# =========================================================================
# SANDWICH ORDER
# =========================================================================


class Bread(Enum):
    ITALIAN = "Italian"
    WHEAT = "Wheat"
    HONEY_OAT = "Honey Oat"
    FLATBREAD = "Flatbread"
    WRAP = "Wrap"


class FillingType(Enum):
    TURKEY = "Turkey"
    HAM = "Ham"
    BACON = "Bacon"
    CHICKEN = "Chicken"
    FALAFEL = "Falafel"


@one_of
class Filling:
    pass


@dataclass
class Turkey(Filling):
    pass


@dataclass
class Meatball(Filling):
    pass


@dataclass
class VeggiePatty(Filling):
    pass


@dataclass
class Double(Filling, newtype=True, label="Double portion"):
    filling: FillingType = ask("Which filling to double?")


@dataclass
class Combo(Filling, label="Custom combo"):
    first: FillingType = ask("First filling:")
    second: FillingType = ask("Second filling:")


class Topping(Enum):
    LETTUCE = "Lettuce"
    TOMATO = "Tomato"
    ONION = "Onion"
    PICKLE = "Pickle"
    OLIVE = "Olive"
    JALAPENO = "Jalapeno"
    SPINACH = "Spinach"
    AVOCADO = "Avocado"


class Size(Enum):
    SIX = "6 inch ($7)"
    FOOTLONG = "Footlong ($12)"


MAX_TOPPINGS = 6


def validate_toppings(value, responses):
    if len(value.value) > MAX_TOPPINGS:
        return f"Max {MAX_TOPPINGS} toppings ($3 budget) - you picked {len(value.value)}"
    return None


def validate_order(responses):
    """A footlong wrap does not exist."""
    errors = {}
    size = responses.get("size.selected_variant")
    bread = responses.get("bread.selected_variant")
    if size is not None and bread is not None:
        if list(Size)[size.value] is Size.FOOTLONG and list(Bread)[bread.value] is Bread.WRAP:
            errors["bread"] = "Wraps only come in 6 inch"
    return errors


@survey(
    prelude="Build your sandwich!",
    epilogue="Order placed. Enjoy!",
    validate=validate_order,
)
@dataclass
class SandwichOrder:
    name: str = ask("Name for the order:")
    size: Size = ask("Size:")
    bread: Bread = ask("Bread:")
    filling: Filling = ask("Filling:")
    toppings: List[Topping] = ask("Toppings:", validate=validate_toppings)
    toasted: bool = ask("Toasted?")
    notes: Optional[str] = ask("Special instructions (optional):")
    tip: Optional[float] = ask("Tip ($, optional):", min=0)
