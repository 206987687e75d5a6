"""
Velora Games — Intimacy Spectrum catalog

Thirty slider questions (0 = left label, 100 = right label) in six
categories, ordered from warm-up to the spiciest.  Sessions always play
them in this order.
"""

from app.catalogs.types import CategoryInfo, SpectrumQuestion

CATEGORIES: dict[str, CategoryInfo] = {
    "desire_drive": CategoryInfo("Desire & Drive", "🔥", "Frequency, libido, timing"),
    "initiation_power": CategoryInfo("Initiation & Power", "🔥", "Who leads, dominance dynamics"),
    "turn_ons": CategoryInfo("Turn-ons & Chemistry", "🔥🔥", "What ignites the spark"),
    "communication": CategoryInfo("Communication & Vocal", "🔥🔥", "Dirty talk, sounds, verbal expression"),
    "fantasy_roleplay": CategoryInfo("Fantasy & Roleplay", "🔥🔥🔥", "Scenarios, imagination, exploration"),
    "kinks_intensity": CategoryInfo("Kinks & Intensity", "🔥🔥🔥", "Specific preferences, boundaries"),
}

QUESTIONS: tuple[SpectrumQuestion, ...] = (
    SpectrumQuestion(
        number=1,
        category="desire_drive",
        text="How often does your ideal sex life look like?",
        left_label="A few times a month is perfect",
        right_label="Multiple times a day if possible",
        insight="Reveals baseline libido and frequency expectations",
        spice_level=1,
    ),
    SpectrumQuestion(
        number=2,
        category="desire_drive",
        text="When do you feel most sexually charged?",
        left_label="Slow morning intimacy",
        right_label="Late night passion",
        insight="Reveals timing preferences for intimacy",
        spice_level=1,
    ),
    SpectrumQuestion(
        number=3,
        category="desire_drive",
        text="How strong is your sex drive typically?",
        left_label="I can take it or leave it",
        right_label="It's constantly on my mind",
        insight="Reveals overall sexual appetite and priority",
        spice_level=1,
    ),
    SpectrumQuestion(
        number=4,
        category="desire_drive",
        text="Quickies vs marathon sessions?",
        left_label="Love a fast, intense quickie",
        right_label="Hours of building pleasure",
        insight="Reveals preferred duration and pacing",
        spice_level=1,
    ),
    SpectrumQuestion(
        number=5,
        category="desire_drive",
        text="When stressed, does sex help you?",
        left_label="I need space, not sex",
        right_label="Best stress relief there is",
        insight="Reveals role of sex in emotional regulation",
        spice_level=1,
    ),
    SpectrumQuestion(
        number=6,
        category="initiation_power",
        text="Who should initiate sex more often?",
        left_label="I want to be pursued and seduced",
        right_label="I love being the one to start it",
        insight="Reveals initiation preferences and pursuit dynamics",
        spice_level=1,
    ),
    SpectrumQuestion(
        number=7,
        category="initiation_power",
        text="In the bedroom, do you prefer to lead or follow?",
        left_label="I want them to take control",
        right_label="I want to be in charge",
        insight="Reveals dominant vs submissive tendencies",
        spice_level=1,
    ),
    SpectrumQuestion(
        number=8,
        category="initiation_power",
        text="How do you feel about being 'used' for your partner's pleasure?",
        left_label="Not into that dynamic",
        right_label="Huge turn-on for me",
        insight="Reveals comfort with objectification play",
        spice_level=1,
    ),
    SpectrumQuestion(
        number=9,
        category="initiation_power",
        text="Power play and dominance/submission dynamics?",
        left_label="Keep it equal and vanilla",
        right_label="Love exploring power exchange",
        insight="Reveals interest in D/s dynamics",
        spice_level=1,
    ),
    SpectrumQuestion(
        number=10,
        category="initiation_power",
        text="Being pinned down, held, or physically controlled?",
        left_label="Too intense for me",
        right_label="Yes please",
        insight="Reveals comfort with physical restraint",
        spice_level=1,
    ),
    SpectrumQuestion(
        number=11,
        category="turn_ons",
        text="How important is foreplay to you?",
        left_label="Can skip straight to the main event",
        right_label="Extended foreplay is essential",
        insight="Reveals foreplay needs and buildup preferences",
        spice_level=2,
    ),
    SpectrumQuestion(
        number=12,
        category="turn_ons",
        text="Teasing and denial - being made to wait?",
        left_label="Don't make me wait",
        right_label="The anticipation drives me wild",
        insight="Reveals edging and denial preferences",
        spice_level=2,
    ),
    SpectrumQuestion(
        number=13,
        category="turn_ons",
        text="How much does your partner's scent and taste turn you on?",
        left_label="Not something I focus on",
        right_label="Intoxicating - huge part of attraction",
        insight="Reveals sensory and primal attraction factors",
        spice_level=2,
    ),
    SpectrumQuestion(
        number=14,
        category="turn_ons",
        text="Sexting and building tension throughout the day?",
        left_label="Prefer to keep it in person",
        right_label="Love staying heated all day",
        insight="Reveals digital intimacy and anticipation building",
        spice_level=2,
    ),
    SpectrumQuestion(
        number=15,
        category="turn_ons",
        text="How turned on are you by your partner finishing?",
        left_label="Nice but not a focus",
        right_label="Their pleasure is my biggest turn-on",
        insight="Reveals partner-pleasure orientation",
        spice_level=2,
    ),
    SpectrumQuestion(
        number=16,
        category="communication",
        text="How vocal are you during sex?",
        left_label="Quiet and subtle",
        right_label="Loud and expressive",
        insight="Reveals vocal expression during intimacy",
        spice_level=2,
    ),
    SpectrumQuestion(
        number=17,
        category="communication",
        text="Dirty talk during sex?",
        left_label="Prefer silence or soft words",
        right_label="The filthier the better",
        insight="Reveals dirty talk preferences and comfort",
        spice_level=2,
    ),
    SpectrumQuestion(
        number=18,
        category="communication",
        text="Being told exactly what to do in bed?",
        left_label="I like to figure it out naturally",
        right_label="Command me - it's so hot",
        insight="Reveals receptiveness to sexual instruction",
        spice_level=2,
    ),
    SpectrumQuestion(
        number=19,
        category="communication",
        text="Verbal degradation or praise during sex?",
        left_label="Only sweet and romantic words",
        right_label="Call me names - I love it",
        insight="Reveals praise vs degradation preferences",
        spice_level=2,
    ),
    SpectrumQuestion(
        number=20,
        category="communication",
        text="Talking about sex openly outside the bedroom?",
        left_label="Awkward - I avoid it",
        right_label="Love detailed discussions about desires",
        insight="Reveals sexual communication comfort",
        spice_level=2,
    ),
    SpectrumQuestion(
        number=21,
        category="fantasy_roleplay",
        text="How active is your sexual imagination and fantasy life?",
        left_label="Pretty straightforward desires",
        right_label="Constantly having elaborate fantasies",
        insight="Reveals fantasy richness and imagination",
        spice_level=3,
    ),
    SpectrumQuestion(
        number=22,
        category="fantasy_roleplay",
        text="Roleplay scenarios (strangers meeting, boss/employee, etc.)?",
        left_label="Too awkward for me",
        right_label="Love becoming different characters",
        insight="Reveals roleplay interest and creativity",
        spice_level=3,
    ),
    SpectrumQuestion(
        number=23,
        category="fantasy_roleplay",
        text="Watching or being watched (voyeurism/exhibitionism)?",
        left_label="Strictly private always",
        right_label="The idea really excites me",
        insight="Reveals exhibitionist/voyeur tendencies",
        spice_level=3,
    ),
    SpectrumQuestion(
        number=24,
        category="fantasy_roleplay",
        text="Bringing a third person into the bedroom?",
        left_label="Absolutely not for me",
        right_label="Open to exploring that",
        insight="Reveals openness to non-monogamous play",
        spice_level=3,
    ),
    SpectrumQuestion(
        number=25,
        category="fantasy_roleplay",
        text="Making intimate videos or photos together?",
        left_label="Never - too risky",
        right_label="Hot - with the right trust",
        insight="Reveals comfort with intimate content creation",
        spice_level=3,
    ),
    SpectrumQuestion(
        number=26,
        category="kinks_intensity",
        text="How do you feel about incorporating toys?",
        left_label="Don't need them at all",
        right_label="The more the better",
        insight="Reveals openness to sex toys",
        spice_level=3,
    ),
    SpectrumQuestion(
        number=27,
        category="kinks_intensity",
        text="Light pain play (biting, scratching, spanking)?",
        left_label="Keep it gentle always",
        right_label="Leave marks on me",
        insight="Reveals pain/pleasure threshold",
        spice_level=3,
    ),
    SpectrumQuestion(
        number=28,
        category="kinks_intensity",
        text="Bondage and restraints?",
        left_label="Not my thing at all",
        right_label="Tie me up or let me tie you",
        insight="Reveals bondage interest",
        spice_level=3,
    ),
    SpectrumQuestion(
        number=29,
        category="kinks_intensity",
        text="How adventurous are you with locations?",
        left_label="Bedroom only please",
        right_label="Anywhere we might get caught",
        insight="Reveals location adventurousness and exhibitionism",
        spice_level=3,
    ),
    SpectrumQuestion(
        number=30,
        category="kinks_intensity",
        text="Overall, how kinky do you consider yourself?",
        left_label="Vanilla and loving it",
        right_label="The kinkier the better",
        insight="Reveals overall kink identity and openness",
        spice_level=3,
    ),
)

QUESTIONS_BY_NUMBER: dict[int, SpectrumQuestion] = {q.number: q for q in QUESTIONS}
