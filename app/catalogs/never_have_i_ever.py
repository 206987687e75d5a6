"""
Velora Games — Never Have I Ever catalog

Thirty statements in six categories.  Each statement completes the
sentence "Never have I ever ..."; players answer "I have" or "I haven't".
"""

from app.catalogs.types import CategoryInfo, NeverHaveIEverStatement

CATEGORIES: dict[str, CategoryInfo] = {
    "past_patterns": CategoryInfo("Past & Patterns", "🔄", "Relationship history, behavioral patterns"),
    "secrets_honesty": CategoryInfo("Secrets & Honesty", "🤫", "Trust, deception, hidden truths"),
    "emotional_depths": CategoryInfo("Emotional Depths", "💔", "Vulnerability, inner world, attachment"),
    "physical_intimacy": CategoryInfo("Physical & Intimacy", "🔥", "Experience, boundaries, physical compatibility"),
    "desires_fantasies": CategoryInfo("Desires & Fantasies", "✨", "Hidden desires, curiosity, unexplored territory"),
    "dark_confessions": CategoryInfo("Dark Confessions", "🌑", "Shadow side, regrets, things not proud of"),
}

STATEMENTS: tuple[NeverHaveIEverStatement, ...] = (
    NeverHaveIEverStatement(
        number=1,
        category="past_patterns",
        text="cheated on someone",
        insight="Reveals loyalty and fidelity patterns",
        spice_level=2,
    ),
    NeverHaveIEverStatement(
        number=2,
        category="past_patterns",
        text="been the other person in someone's relationship",
        insight="Shows boundaries and moral lines",
        spice_level=2,
    ),
    NeverHaveIEverStatement(
        number=3,
        category="past_patterns",
        text="stayed in a toxic relationship longer than I should have",
        insight="Reveals self-worth and red flag recognition",
        spice_level=2,
    ),
    NeverHaveIEverStatement(
        number=4,
        category="past_patterns",
        text="ended a relationship over text or by ghosting",
        insight="Shows conflict handling and maturity",
        spice_level=2,
    ),
    NeverHaveIEverStatement(
        number=5,
        category="past_patterns",
        text="gone back to someone who hurt me badly",
        insight="Reveals patterns and self-respect",
        spice_level=2,
    ),
    NeverHaveIEverStatement(
        number=6,
        category="secrets_honesty",
        text="snooped through a partner's phone",
        insight="Shows trust issues and insecurity levels",
        spice_level=2,
    ),
    NeverHaveIEverStatement(
        number=7,
        category="secrets_honesty",
        text="hidden something major from someone I was dating",
        insight="Reveals honesty patterns in relationships",
        spice_level=2,
    ),
    NeverHaveIEverStatement(
        number=8,
        category="secrets_honesty",
        text="maintained a friendship my partner would be uncomfortable knowing about",
        insight="Shows boundaries and transparency",
        spice_level=2,
    ),
    NeverHaveIEverStatement(
        number=9,
        category="secrets_honesty",
        text="lied about my past to someone I was seeing",
        insight="Reveals authenticity and acceptance fears",
        spice_level=2,
    ),
    NeverHaveIEverStatement(
        number=10,
        category="secrets_honesty",
        text="kept a dating app active while in a relationship",
        insight="Shows commitment readiness",
        spice_level=2,
    ),
    NeverHaveIEverStatement(
        number=11,
        category="emotional_depths",
        text="said \"I love you\" without meaning it",
        insight="Reveals emotional honesty",
        spice_level=2,
    ),
    NeverHaveIEverStatement(
        number=12,
        category="emotional_depths",
        text="used someone for emotional support without real feelings",
        insight="Shows emotional manipulation patterns",
        spice_level=2,
    ),
    NeverHaveIEverStatement(
        number=13,
        category="emotional_depths",
        text="been so attached that I lost myself in a relationship",
        insight="Reveals attachment style and codependency",
        spice_level=2,
    ),
    NeverHaveIEverStatement(
        number=14,
        category="emotional_depths",
        text="pushed someone away because I was scared of getting close",
        insight="Shows avoidant patterns and emotional walls",
        spice_level=2,
    ),
    NeverHaveIEverStatement(
        number=15,
        category="emotional_depths",
        text="compared my partner to my ex",
        insight="Reveals emotional baggage and closure",
        spice_level=2,
    ),
    NeverHaveIEverStatement(
        number=16,
        category="physical_intimacy",
        text="had a one-night stand",
        insight="Reveals casual vs emotional intimacy patterns",
        spice_level=3,
    ),
    NeverHaveIEverStatement(
        number=17,
        category="physical_intimacy",
        text="been intimate with someone on the first date",
        insight="Shows pace and physical comfort levels",
        spice_level=3,
    ),
    NeverHaveIEverStatement(
        number=18,
        category="physical_intimacy",
        text="regretted being intimate with someone",
        insight="Reveals past experiences and standards",
        spice_level=3,
    ),
    NeverHaveIEverStatement(
        number=19,
        category="physical_intimacy",
        text="felt pressured to get physical before I was ready",
        insight="Shows boundary experiences and past pressures",
        spice_level=3,
    ),
    NeverHaveIEverStatement(
        number=20,
        category="physical_intimacy",
        text="had a friends-with-benefits situation",
        insight="Reveals casual relationship patterns",
        spice_level=3,
    ),
    NeverHaveIEverStatement(
        number=21,
        category="desires_fantasies",
        text="had a fantasy I've never shared with anyone",
        insight="Shows openness and private desires",
        spice_level=3,
    ),
    NeverHaveIEverStatement(
        number=22,
        category="desires_fantasies",
        text="been curious to try something my partner suggested",
        insight="Reveals openness to exploration",
        spice_level=3,
    ),
    NeverHaveIEverStatement(
        number=23,
        category="desires_fantasies",
        text="been attracted to someone while in a relationship",
        insight="Shows honesty about human nature",
        spice_level=3,
    ),
    NeverHaveIEverStatement(
        number=24,
        category="desires_fantasies",
        text="had a crush on a friend's partner or ex",
        insight="Reveals forbidden attraction experiences",
        spice_level=3,
    ),
    NeverHaveIEverStatement(
        number=25,
        category="desires_fantasies",
        text="kept a desire to myself because I thought I'd be judged",
        insight="Shows sexual shame and communication barriers",
        spice_level=3,
    ),
    NeverHaveIEverStatement(
        number=26,
        category="dark_confessions",
        text="emotionally manipulated someone to get what I wanted",
        insight="Shows self-awareness about toxic behavior",
        spice_level=3,
    ),
    NeverHaveIEverStatement(
        number=27,
        category="dark_confessions",
        text="led someone on knowing I wasn't interested",
        insight="Reveals empathy and honesty patterns",
        spice_level=3,
    ),
    NeverHaveIEverStatement(
        number=28,
        category="dark_confessions",
        text="said something in anger that I can never take back",
        insight="Shows anger patterns and regret capacity",
        spice_level=3,
    ),
    NeverHaveIEverStatement(
        number=29,
        category="dark_confessions",
        text="kept someone as a backup option while pursuing someone else",
        insight="Reveals relationship integrity",
        spice_level=3,
    ),
    NeverHaveIEverStatement(
        number=30,
        category="dark_confessions",
        text="done something in a relationship that I'm not proud of",
        insight="Opens conversation about growth and regret",
        spice_level=3,
    ),
)

STATEMENTS_BY_NUMBER: dict[int, NeverHaveIEverStatement] = {s.number: s for s in STATEMENTS}
