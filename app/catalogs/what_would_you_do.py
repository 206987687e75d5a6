"""
Velora Games — What Would You Do catalog

Fifteen relationship scenarios answered by voice.  Every session plays all
of them; players may answer in any order.
"""

from app.catalogs.types import CategoryInfo, Scenario

CATEGORIES: dict[str, CategoryInfo] = {
    "trust_honesty": CategoryInfo("Trust & Honesty", "🔐", "Are they honest? Do they hide things?"),
    "communication": CategoryInfo("Communication", "💬", "How do they handle conflict and hard conversations?"),
    "respect": CategoryInfo("Respect", "🤝", "Do they respect you publicly and privately?"),
    "values": CategoryInfo("Values & Priorities", "⚖️", "What matters to them? Where do you stand?"),
    "intimacy": CategoryInfo("Intimacy", "💕", "Can they communicate about physical and emotional intimacy?"),
    "control_flags": CategoryInfo("Red Flag Radar", "🚩", "Spotting control, manipulation, and jealousy"),
}

SCENARIOS: tuple[Scenario, ...] = (
    Scenario(
        number=1,
        category="trust_honesty",
        text="You find out your partner has ₹5 lakh in credit card debt they never mentioned. When you ask, they say 'it's not a big deal, I'll handle it.' How does this make you feel and what do you do?",
        insight="Reveals expectations around financial transparency and how they handle hidden truths",
        core_question="Are they financially responsible and honest?",
        intensity=2,
        suggested_duration=60,
        analysis_hints=("financial honesty", "trust", "communication about money", "dealbreaker assessment", "forgiveness vs accountability"),
    ),
    Scenario(
        number=2,
        category="trust_honesty",
        text="You discover your partner still talks to their ex regularly and never told you. They say it's purely friendly and 'didn't want to make you insecure.' What's your reaction?",
        insight="Tests boundaries around exes, transparency expectations, and trust foundations",
        core_question="Do they keep things from you \"for your own good\"?",
        intensity=3,
        suggested_duration=60,
        analysis_hints=("transparency", "ex boundaries", "trust", "communication", "insecurity handling"),
    ),
    Scenario(
        number=3,
        category="communication",
        text="You had a genuine disagreement. Instead of talking it out, your partner gave you silent treatment for 3 days and then acted like nothing happened. How do you address this pattern?",
        insight="Reveals conflict resolution style and emotional maturity expectations",
        core_question="Can they handle conflict like an adult?",
        intensity=2,
        suggested_duration=60,
        analysis_hints=("conflict resolution", "emotional maturity", "communication style", "pattern recognition", "dealbreaker assessment"),
    ),
    Scenario(
        number=4,
        category="communication",
        text="Your partner said something hurtful. Instead of apologizing, they said 'I was just joking, you're too sensitive.' This happens often. How do you address this?",
        insight="Tests accountability expectations and emotional intelligence",
        core_question="Do they take responsibility or deflect?",
        intensity=3,
        suggested_duration=60,
        analysis_hints=("accountability", "gaslighting awareness", "emotional intelligence", "pattern tolerance", "self-respect"),
    ),
    Scenario(
        number=5,
        category="communication",
        text="You try to have an honest conversation about physical expectations, boundaries, or past experiences. Your partner either shuts down completely, gets awkward and changes the topic, or judges you for even bringing it up. What do you do?",
        insight="Reveals maturity around difficult conversations and intimacy communication",
        core_question="Can they talk about hard things?",
        intensity=3,
        suggested_duration=60,
        analysis_hints=("intimacy communication", "maturity", "judgment", "openness", "compatibility in communication style"),
    ),
    Scenario(
        number=6,
        category="respect",
        text="Your partner went through your phone while you were asleep. When confronted, they said 'If you have nothing to hide, why do you care?' What happens next?",
        insight="Tests boundary respect, privacy expectations, and trust dynamics",
        core_question="Do they respect your boundaries?",
        intensity=3,
        suggested_duration=60,
        analysis_hints=("privacy", "boundaries", "trust", "accountability", "manipulation recognition"),
    ),
    Scenario(
        number=7,
        category="respect",
        text="In front of their family, your partner dismisses your opinions and talks over you. Later they say, 'I have to act a certain way around them, you know how they are.' How do you handle this?",
        insight="Reveals public vs private treatment and whether they defend you",
        core_question="Are they the same person everywhere?",
        intensity=3,
        suggested_duration=60,
        analysis_hints=("public respect", "consistency", "family dynamics", "having your back", "self-respect"),
    ),
    Scenario(
        number=8,
        category="respect",
        text="You get a huge career win - better job, higher salary than theirs, public recognition. Instead of celebrating, your partner seems distant or makes small comments that undermine it. What do you do?",
        insight="Tests ego, insecurity, and ability to celebrate your success",
        core_question="Can they handle you being successful?",
        intensity=2,
        suggested_duration=60,
        analysis_hints=("ego", "insecurity", "support", "equality", "celebration vs competition"),
    ),
    Scenario(
        number=9,
        category="values",
        text="Your partner's parents don't approve of you - maybe your background, caste, profession, or family status. Your partner says they love you but need 'time to convince them.' It's been 6 months. Nothing has changed. What do you need from them?",
        insight="Reveals whether they will fight for you or let family decide",
        core_question="Will they choose you?",
        intensity=3,
        suggested_duration=90,
        analysis_hints=("family loyalty", "commitment", "action vs words", "timeline expectations", "self-worth"),
    ),
    Scenario(
        number=10,
        category="values",
        text="Your partner's closest friends make you uncomfortable - they're disrespectful to women, or drink too much, or gossip about everyone. Your partner says 'that's just how they are, I'm not like them.' Is this a problem for you?",
        insight="Tests values alignment - you are who you surround yourself with",
        core_question="What do their friendships reveal about them?",
        intensity=2,
        suggested_duration=60,
        analysis_hints=("values", "friend circle", "character judgment", "influence", "boundaries"),
    ),
    Scenario(
        number=11,
        category="values",
        text="You're getting serious, but your partner avoids conversations about the future - where to live, kids, finances, career plans. They say 'let's just enjoy the present, why stress?' How do you handle this?",
        insight="Reveals commitment readiness and future alignment",
        core_question="Are they serious about a future with you?",
        intensity=3,
        suggested_duration=60,
        analysis_hints=("commitment", "future planning", "avoidance patterns", "compatibility", "timeline alignment"),
    ),
    Scenario(
        number=12,
        category="control_flags",
        text="Your partner gets upset when you spend time with your friends, especially if they're of the opposite gender. They call it 'caring' and 'loving you too much.' What's your take on this?",
        insight="Identifies jealousy and control disguised as love",
        core_question="Is this love or control?",
        intensity=3,
        suggested_duration=60,
        analysis_hints=("jealousy", "control", "trust", "independence", "red flag recognition"),
    ),
    Scenario(
        number=13,
        category="control_flags",
        text="Your partner posts everything about your relationship online - photos, details, even hints about fights. When you ask for privacy, they say 'if you loved me, you'd want to show it.' What do you do?",
        insight="Tests privacy respect and emotional manipulation recognition",
        core_question="Do they respect your need for privacy?",
        intensity=2,
        suggested_duration=60,
        analysis_hints=("privacy", "social media boundaries", "manipulation", "respect", "guilt-tripping recognition"),
    ),
    Scenario(
        number=14,
        category="control_flags",
        text="Your partner is offered a big promotion, but it means 70-hour work weeks for the next 2 years. They're excited and didn't really ask how you feel about barely seeing them. How do you respond?",
        insight="Reveals whether they consider you in big decisions",
        core_question="Are you part of their decisions?",
        intensity=2,
        suggested_duration=60,
        analysis_hints=("partnership", "decision making", "priorities", "consideration", "communication expectations"),
    ),
    Scenario(
        number=15,
        category="intimacy",
        text="Your partner keeps pushing for physical intimacy faster than you're comfortable with. When you say you want to wait, they say 'If you really loved me, you wouldn't make me wait' or sulk about it. How do you respond?",
        insight="Tests consent understanding, boundary respect, and manipulation recognition",
        core_question="Do they respect your physical boundaries?",
        intensity=4,
        suggested_duration=60,
        analysis_hints=("consent", "boundaries", "manipulation", "pressure", "respect", "dealbreaker assessment"),
    ),
)

SCENARIOS_BY_NUMBER: dict[int, Scenario] = {s.number: s for s in SCENARIOS}
