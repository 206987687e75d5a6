"""
Velora Games — Dream Board catalog

Ten life categories, each offering four vision cards (A-D).  Players pick
one card per category and tag it with a priority and a timeline.
"""

from app.catalogs.types import DreamCard, DreamCategory

CATEGORIES: tuple[DreamCategory, ...] = (
    DreamCategory(
        number=1,
        category_id="our_home",
        title="Our Home",
        emoji="🏠",
        question="Where do you see us building our life together?",
        insight="Where you live shapes daily routines, social life, and sense of belonging. Alignment here affects lifestyle compatibility.",
        analysis_hints=("urban vs rural", "stability vs adventure", "space vs convenience"),
        cards=(
            DreamCard(card_id="A", emoji="🏙️", title="City Heartbeat", subtitle="High-rise living with urban energy"),
            DreamCard(card_id="B", emoji="🏡", title="Suburb Sweet Spot", subtitle="A home with a garden and peaceful streets"),
            DreamCard(card_id="C", emoji="🌳", title="Small Town Roots", subtitle="Simple living where everyone knows your name"),
            DreamCard(card_id="D", emoji="🌍", title="Wherever Life Takes Us", subtitle="Home is where we are together"),
        ),
    ),
    DreamCategory(
        number=2,
        category_id="our_family",
        title="Our Family",
        emoji="👨‍👩‍👧‍👦",
        question="What does family look like for us?",
        insight="Family planning is foundational. Different visions here need early, honest conversation.",
        analysis_hints=("children preference", "family size", "parenting readiness"),
        cards=(
            DreamCard(card_id="A", emoji="👶", title="One Little Star", subtitle="One child to pour all our love into"),
            DreamCard(card_id="B", emoji="👨‍👩‍👧‍👦", title="Full House", subtitle="A home full of little feet (2-3 kids)"),
            DreamCard(card_id="C", emoji="🐕", title="Fur Babies Only", subtitle="Our pets are our children"),
            DreamCard(card_id="D", emoji="🤷", title="Let's See What Happens", subtitle="Open to whatever life brings"),
        ),
    ),
    DreamCategory(
        number=3,
        category_id="our_careers",
        title="Our Careers",
        emoji="💼",
        question="How do we balance ambition and life?",
        insight="Career priorities affect time together, finances, and life rhythm. Understanding each other's ambitions prevents future conflict.",
        analysis_hints=("ambition level", "work-life balance", "career vs family priority"),
        cards=(
            DreamCard(card_id="A", emoji="🚀", title="Chasing Big Dreams", subtitle="Ambitious, driven, reaching for the top"),
            DreamCard(card_id="B", emoji="⚖️", title="Balance is Everything", subtitle="Work to live, not live to work"),
            DreamCard(card_id="C", emoji="🎨", title="Passion Over Paychecks", subtitle="Doing what we love, even if it pays less"),
            DreamCard(card_id="D", emoji="🏠", title="Home is My Priority", subtitle="Career takes a backseat to family"),
        ),
    ),
    DreamCategory(
        number=4,
        category_id="our_money",
        title="Our Money",
        emoji="💰",
        question="How do we think about money together?",
        insight="Financial compatibility is crucial for long-term harmony. Different money mindsets cause significant relationship stress.",
        analysis_hints=("spending vs saving", "risk tolerance", "financial planning style"),
        cards=(
            DreamCard(card_id="A", emoji="🐿️", title="Save for Tomorrow", subtitle="Security first, splurge later"),
            DreamCard(card_id="B", emoji="📈", title="Grow Our Wealth", subtitle="Invest smart, build for the future"),
            DreamCard(card_id="C", emoji="🎉", title="Live for Today", subtitle="Experiences over savings accounts"),
            DreamCard(card_id="D", emoji="🤝", title="We'll Figure It Out Together", subtitle="No strong preferences, open to discussion"),
        ),
    ),
    DreamCategory(
        number=5,
        category_id="our_weekends",
        title="Our Weekends",
        emoji="🛋️",
        question="How do we spend our free time together?",
        insight="Weekend preferences reveal introversion/extroversion and recharge styles. Mismatched needs can drain both partners.",
        analysis_hints=("social vs private", "active vs relaxed", "family vs friends"),
        cards=(
            DreamCard(card_id="A", emoji="🎬", title="Cozy Homebodies", subtitle="Netflix, cooking, and quiet time together"),
            DreamCard(card_id="B", emoji="👯", title="Friends & Gatherings", subtitle="Our social life is our happy place"),
            DreamCard(card_id="C", emoji="🏃", title="Adventure Mode", subtitle="Always exploring, hiking, or trying something new"),
            DreamCard(card_id="D", emoji="👨‍👩‍👧", title="Family Comes First", subtitle="Weekends are for parents, siblings, extended family"),
        ),
    ),
    DreamCategory(
        number=6,
        category_id="our_adventures",
        title="Our Adventures",
        emoji="✈️",
        question="How important is travel and adventure to us?",
        insight="Travel preferences affect budgeting, time off, and shared experiences. Wanderlust vs homebody is a key lifestyle factor.",
        analysis_hints=("travel frequency", "adventure level", "exploration priority"),
        cards=(
            DreamCard(card_id="A", emoji="🗺️", title="Bucket List Travelers", subtitle="See the world, one destination at a time"),
            DreamCard(card_id="B", emoji="🏖️", title="Annual Getaways", subtitle="One or two good vacations a year is perfect"),
            DreamCard(card_id="C", emoji="🚗", title="Weekend Wanderers", subtitle="Road trips and nearby escapes over big vacations"),
            DreamCard(card_id="D", emoji="🏠", title="Home is Our Happy Place", subtitle="We don't need to go anywhere to be happy"),
        ),
    ),
    DreamCategory(
        number=7,
        category_id="our_roots",
        title="Our Roots",
        emoji="👪",
        question="How involved are our families in our life?",
        insight="Family involvement expectations vary greatly. This is especially important in Indian cultural context where joint families are common.",
        analysis_hints=("family proximity", "independence level", "tradition vs modernity"),
        cards=(
            DreamCard(card_id="A", emoji="🏠", title="Together Under One Roof", subtitle="Joint family living with parents"),
            DreamCard(card_id="B", emoji="🏘️", title="Close But Separate", subtitle="Our own space, but family nearby"),
            DreamCard(card_id="C", emoji="📞", title="Love From a Distance", subtitle="Independent life with regular visits"),
            DreamCard(card_id="D", emoji="🌱", title="Building Our Own Roots", subtitle="Creating new traditions as a couple"),
        ),
    ),
    DreamCategory(
        number=8,
        category_id="our_intimacy",
        title="Our Intimacy",
        emoji="🔥",
        question="How do we connect physically and emotionally?",
        insight="Intimacy expectations affect relationship satisfaction deeply. Understanding needs prevents mismatched expectations.",
        analysis_hints=("physical vs emotional", "frequency expectations", "affection style"),
        cards=(
            DreamCard(card_id="A", emoji="💋", title="Keep the Fire Burning", subtitle="Physical connection is essential to us"),
            DreamCard(card_id="B", emoji="🤗", title="Cuddles & Closeness", subtitle="Affection matters more than intensity"),
            DreamCard(card_id="C", emoji="💬", title="Emotional Depth First", subtitle="Deep conversations fuel our connection"),
            DreamCard(card_id="D", emoji="🌊", title="Ebbs & Flows", subtitle="Our intimacy naturally changes over time"),
        ),
    ),
    DreamCategory(
        number=9,
        category_id="our_growth",
        title="Our Growth",
        emoji="🌱",
        question="How do we grow as individuals and together?",
        insight="Personal development priorities shape daily habits and long-term goals. Shared growth values strengthen bonds.",
        analysis_hints=("spiritual vs intellectual", "health focus", "ambition for growth"),
        cards=(
            DreamCard(card_id="A", emoji="🧘", title="Spiritual Seekers", subtitle="Inner peace and spiritual growth guide us"),
            DreamCard(card_id="B", emoji="📚", title="Always Learning", subtitle="Curiosity keeps us young"),
            DreamCard(card_id="C", emoji="💪", title="Health is Wealth", subtitle="Physical fitness is a shared priority"),
            DreamCard(card_id="D", emoji="😌", title="Just Living & Loving", subtitle="No big self-improvement agenda"),
        ),
    ),
    DreamCategory(
        number=10,
        category_id="our_someday",
        title="Our Someday",
        emoji="🌅",
        question="What does our future look like when we're old?",
        insight="Long-term vision alignment ensures you're building toward the same destination. Retirement dreams reveal core values.",
        analysis_hints=("retirement style", "legacy focus", "long-term priorities"),
        cards=(
            DreamCard(card_id="A", emoji="🏖️", title="Retire Early & Travel", subtitle="Financial freedom to explore the world"),
            DreamCard(card_id="B", emoji="🏡", title="Grandkids & Garden", subtitle="A peaceful life surrounded by family"),
            DreamCard(card_id="C", emoji="🎯", title="Never Stop Working", subtitle="Purpose keeps us alive"),
            DreamCard(card_id="D", emoji="🤲", title="Give Back", subtitle="Leave the world better than we found it"),
        ),
    ),
)

CATEGORIES_BY_NUMBER: dict[int, DreamCategory] = {c.number: c for c in CATEGORIES}

# Prompts shown after a selection to invite a voice elaboration.
ELABORATION_HINTS: dict[str, str] = {
    "our_home": "Tell them what a perfect day in this home looks like.",
    "our_family": "Share what family means to you and why this picture fits.",
    "our_careers": "Explain how you want work to fit around the life you share.",
    "our_money": "Talk about what money should make possible for the two of you.",
    "our_weekends": "Describe the weekend you would repeat forever.",
    "our_adventures": "Share the adventure you keep daydreaming about.",
    "our_roots": "Talk about how close you want to stay to where you come from.",
    "our_intimacy": "Say what keeps the spark alive for you.",
    "our_growth": "Share how you want to grow, together and apart.",
    "our_someday": "Describe the someday you are quietly hoping for.",
}

PRIORITY_INFO: dict[str, dict[str, str]] = {
    "heart_set": {"label": "My heart is set", "emoji": "❤️", "description": "Non-negotiable, this is essential"},
    "dream": {"label": "I dream of this", "emoji": "✨", "description": "Want this, but can discuss"},
    "flow": {"label": "I'll flow with life", "emoji": "🌊", "description": "Flexible, open to partner's vision"},
}

TIMELINE_INFO: dict[str, dict[str, str]] = {
    "cant_wait": {"label": "Can't wait", "emoji": "🔥", "description": "1-2 years"},
    "when_right": {"label": "When it feels right", "emoji": "🌸", "description": "3-5 years"},
    "someday": {"label": "Someday", "emoji": "🌙", "description": "5+ years / No rush"},
}
