"""
Velora Games — Would You Rather catalog

Fifty A/B dilemmas across eleven life categories.  Sessions shuffle the
question order; ``number`` is the stable identifier recorded in answers.
"""

from app.catalogs.types import CategoryInfo, WouldYouRatherQuestion

CATEGORIES: dict[str, CategoryInfo] = {
    "lifestyle": CategoryInfo("Lifestyle", "🏡", "Daily rhythm, habits and home life"),
    "money": CategoryInfo("Money", "💰", "Spending, saving and financial priorities"),
    "family": CategoryInfo("Family", "👨‍👩‍👧", "Kids, parents and family closeness"),
    "love": CategoryInfo("Love", "❤️", "How you give and receive affection"),
    "intimacy": CategoryInfo("Intimacy", "🔥", "Physical and emotional closeness"),
    "conflict": CategoryInfo("Conflict", "⚡", "Arguments, repair and boundaries"),
    "travel": CategoryInfo("Travel", "✈️", "Adventure versus comfort"),
    "philosophy": CategoryInfo("Philosophy", "🧠", "Values and outlook on life"),
    "friendship": CategoryInfo("Friendship", "🤝", "Social circles and time with friends"),
    "hobbies": CategoryInfo("Hobbies", "🎨", "Free time and shared interests"),
    "future": CategoryInfo("Future", "🔮", "Long-term plans and ambitions"),
}

QUESTIONS: tuple[WouldYouRatherQuestion, ...] = (
    WouldYouRatherQuestion(
        number=1,
        category="lifestyle",
        option_a="Be a morning person forever",
        option_b="Be a night owl forever",
        insight="Reveals daily rhythm and schedule compatibility",
        spice_level=1,
    ),
    WouldYouRatherQuestion(
        number=2,
        category="lifestyle",
        option_a="Cook every meal at home",
        option_b="Eat out or order in for every meal",
        insight="Reveals domestic preferences and food habits",
        spice_level=1,
    ),
    WouldYouRatherQuestion(
        number=3,
        category="lifestyle",
        option_a="Live in a messy home with relaxed vibes",
        option_b="Live in a spotless home with strict cleaning rules",
        insight="Reveals cleanliness standards and flexibility",
        spice_level=1,
    ),
    WouldYouRatherQuestion(
        number=4,
        category="lifestyle",
        option_a="Follow a strict daily routine",
        option_b="Go with the flow and be spontaneous",
        insight="Reveals need for structure vs flexibility",
        spice_level=1,
    ),
    WouldYouRatherQuestion(
        number=5,
        category="lifestyle",
        option_a="Work from home forever",
        option_b="Work from office forever",
        insight="Reveals work style and space preferences",
        spice_level=1,
    ),
    WouldYouRatherQuestion(
        number=6,
        category="lifestyle",
        option_a="Live in a big city apartment",
        option_b="Live in a peaceful countryside house",
        insight="Reveals environment and pace of life preferences",
        spice_level=1,
    ),
    WouldYouRatherQuestion(
        number=7,
        category="money",
        option_a="Retire at 40 with modest savings",
        option_b="Retire at 60 with luxury savings",
        insight="Reveals financial planning and life priorities",
        spice_level=1,
    ),
    WouldYouRatherQuestion(
        number=8,
        category="money",
        option_a="Have a high-paying job you dislike",
        option_b="Have a low-paying job you absolutely love",
        insight="Reveals values around money vs fulfillment",
        spice_level=1,
    ),
    WouldYouRatherQuestion(
        number=9,
        category="money",
        option_a="Spend money on experiences (travel, dining)",
        option_b="Spend money on things (gadgets, clothes, home)",
        insight="Reveals spending philosophy and what brings joy",
        spice_level=1,
    ),
    WouldYouRatherQuestion(
        number=10,
        category="money",
        option_a="Split all finances 50/50 in marriage",
        option_b="Pool everything together in a joint account",
        insight="Reveals financial trust and partnership style",
        spice_level=2,
    ),
    WouldYouRatherQuestion(
        number=11,
        category="money",
        option_a="Take big financial risks for potential big rewards",
        option_b="Always play it safe with money",
        insight="Reveals risk tolerance and financial security needs",
        spice_level=1,
    ),
    WouldYouRatherQuestion(
        number=12,
        category="family",
        option_a="Live close to family (same city)",
        option_b="Live far from family (different city/country)",
        insight="Reveals family attachment and independence",
        spice_level=2,
    ),
    WouldYouRatherQuestion(
        number=13,
        category="family",
        option_a="Have 1 child and give them everything",
        option_b="Have 3+ children with a full house",
        insight="Reveals family size preferences and parenting approach",
        spice_level=2,
    ),
    WouldYouRatherQuestion(
        number=14,
        category="family",
        option_a="Spend every festival/holiday with extended family",
        option_b="Create your own traditions as a couple",
        insight="Reveals family involvement vs couple independence",
        spice_level=2,
    ),
    WouldYouRatherQuestion(
        number=15,
        category="family",
        option_a="Have a partner who is very close to their parents",
        option_b="Have a partner who is independent from their parents",
        insight="Reveals expectations about in-law relationships",
        spice_level=2,
    ),
    WouldYouRatherQuestion(
        number=16,
        category="family",
        option_a="Raise kids with clear rules and discipline",
        option_b="Raise kids with freedom and let them learn naturally",
        insight="Reveals parenting philosophy and values",
        spice_level=2,
    ),
    WouldYouRatherQuestion(
        number=17,
        category="family",
        option_a="Be the fun, adventurous parent",
        option_b="Be the responsible, stable parent",
        insight="Reveals parenting role preferences",
        spice_level=1,
    ),
    WouldYouRatherQuestion(
        number=18,
        category="love",
        option_a="Receive small surprise gifts frequently",
        option_b="Receive one big planned gift on special occasions",
        insight="Reveals love language and appreciation style",
        spice_level=1,
    ),
    WouldYouRatherQuestion(
        number=19,
        category="love",
        option_a="Constant small affection (texts, touches, check-ins)",
        option_b="Occasional grand romantic gestures",
        insight="Reveals affection frequency preferences",
        spice_level=2,
    ),
    WouldYouRatherQuestion(
        number=20,
        category="love",
        option_a="Hear \"I love you\" said out loud every day",
        option_b="Feel loved through actions without the words",
        insight="Reveals verbal vs action-based love expression",
        spice_level=2,
    ),
    WouldYouRatherQuestion(
        number=21,
        category="love",
        option_a="Always know exactly what your partner is thinking",
        option_b="Keep some mystery and surprise alive",
        insight="Reveals need for transparency vs excitement",
        spice_level=2,
    ),
    WouldYouRatherQuestion(
        number=22,
        category="love",
        option_a="Never argue but sometimes feel emotionally distant",
        option_b="Argue often but always feel deeply connected",
        insight="Reveals conflict tolerance and emotional intimacy needs",
        spice_level=2,
    ),
    WouldYouRatherQuestion(
        number=23,
        category="intimacy",
        option_a="Slow, planned romantic evenings",
        option_b="Spontaneous passionate moments anytime",
        insight="Reveals intimacy style and spontaneity preferences",
        spice_level=4,
    ),
    WouldYouRatherQuestion(
        number=24,
        category="intimacy",
        option_a="Usually initiate intimacy yourself",
        option_b="Usually be pursued and desired",
        insight="Reveals intimacy dynamics and role preferences",
        spice_level=4,
    ),
    WouldYouRatherQuestion(
        number=25,
        category="intimacy",
        option_a="Try new things and experiment frequently",
        option_b="Perfect and deepen what you already know works",
        insight="Reveals openness to exploration vs comfort zone",
        spice_level=5,
    ),
    WouldYouRatherQuestion(
        number=26,
        category="intimacy",
        option_a="Talk openly and explicitly about desires",
        option_b="Let actions and body language speak instead",
        insight="Reveals communication style around intimacy",
        spice_level=4,
    ),
    WouldYouRatherQuestion(
        number=27,
        category="intimacy",
        option_a="Emotional connection must come before physical",
        option_b="Physical attraction can spark emotional connection",
        insight="Reveals intimacy sequencing and what builds connection",
        spice_level=3,
    ),
    WouldYouRatherQuestion(
        number=28,
        category="conflict",
        option_a="Address issues and conflicts immediately",
        option_b="Take time to cool off before discussing",
        insight="Reveals conflict resolution timing preferences",
        spice_level=2,
    ),
    WouldYouRatherQuestion(
        number=29,
        category="conflict",
        option_a="Always speak your mind, even if it hurts",
        option_b="Sometimes stay quiet to keep the peace",
        insight="Reveals honesty vs harmony preferences",
        spice_level=2,
    ),
    WouldYouRatherQuestion(
        number=30,
        category="conflict",
        option_a="Fight passionately and resolve quickly",
        option_b="Stay calm but take longer to fully resolve",
        insight="Reveals emotional expression during conflict",
        spice_level=2,
    ),
    WouldYouRatherQuestion(
        number=31,
        category="conflict",
        option_a="Forgive AND forget completely",
        option_b="Forgive but never fully forget",
        insight="Reveals forgiveness style and memory of hurts",
        spice_level=2,
    ),
    WouldYouRatherQuestion(
        number=32,
        category="travel",
        option_a="Travel to 30 new countries in your lifetime",
        option_b="Revisit 5 favorite places over and over",
        insight="Reveals exploration vs familiarity preferences",
        spice_level=1,
    ),
    WouldYouRatherQuestion(
        number=33,
        category="travel",
        option_a="Plan every detail of a trip in advance",
        option_b="Book a flight and figure it out when you land",
        insight="Reveals planning style and comfort with uncertainty",
        spice_level=1,
    ),
    WouldYouRatherQuestion(
        number=34,
        category="travel",
        option_a="Adventure travel (trekking, backpacking, camping)",
        option_b="Luxury travel (resorts, spas, fine dining)",
        insight="Reveals travel style and comfort needs",
        spice_level=1,
    ),
    WouldYouRatherQuestion(
        number=35,
        category="travel",
        option_a="Take a solo trip once a year for yourself",
        option_b="Never travel without your partner",
        insight="Reveals independence needs and togetherness",
        spice_level=2,
    ),
    WouldYouRatherQuestion(
        number=36,
        category="philosophy",
        option_a="Know exactly how you will die",
        option_b="Know exactly when you will die",
        insight="Reveals relationship with mortality and control",
        spice_level=2,
    ),
    WouldYouRatherQuestion(
        number=37,
        category="philosophy",
        option_a="Be widely respected but not deeply loved",
        option_b="Be deeply loved by few but not widely known",
        insight="Reveals what matters more - status or connection",
        spice_level=2,
    ),
    WouldYouRatherQuestion(
        number=38,
        category="philosophy",
        option_a="Have all the money but no free time",
        option_b="Have all the free time but limited money",
        insight="Reveals values around wealth vs freedom",
        spice_level=1,
    ),
    WouldYouRatherQuestion(
        number=39,
        category="philosophy",
        option_a="Always tell the complete truth, no matter what",
        option_b="Tell white lies when it protects someone",
        insight="Reveals honesty philosophy and situational ethics",
        spice_level=2,
    ),
    WouldYouRatherQuestion(
        number=40,
        category="philosophy",
        option_a="Live a short life full of adventure and excitement",
        option_b="Live a long life that is peaceful and stable",
        insight="Reveals life philosophy and risk orientation",
        spice_level=2,
    ),
    WouldYouRatherQuestion(
        number=41,
        category="friendship",
        option_a="Have 2-3 extremely close best friends",
        option_b="Have a large circle of good friends",
        insight="Reveals social depth vs breadth preferences",
        spice_level=1,
    ),
    WouldYouRatherQuestion(
        number=42,
        category="friendship",
        option_a="Go out and party every weekend",
        option_b="Stay in with cozy quiet nights",
        insight="Reveals social energy and weekend preferences",
        spice_level=1,
    ),
    WouldYouRatherQuestion(
        number=43,
        category="friendship",
        option_a="Your partner has mostly same-gender friendships",
        option_b="Your partner has close opposite-gender friendships",
        insight="Reveals trust and boundaries around friendships",
        spice_level=3,
    ),
    WouldYouRatherQuestion(
        number=44,
        category="friendship",
        option_a="Always be the one hosting gatherings",
        option_b="Always be the guest at others' places",
        insight="Reveals social role and hospitality preferences",
        spice_level=1,
    ),
    WouldYouRatherQuestion(
        number=45,
        category="hobbies",
        option_a="Binge an entire TV series together",
        option_b="Watch different movies together",
        insight="Reveals entertainment commitment style",
        spice_level=1,
    ),
    WouldYouRatherQuestion(
        number=46,
        category="hobbies",
        option_a="Play video games together on date night",
        option_b="Play board games or cards together",
        insight="Reveals gaming and interactive play preferences",
        spice_level=1,
    ),
    WouldYouRatherQuestion(
        number=47,
        category="hobbies",
        option_a="Learn a new skill/hobby together as a couple",
        option_b="Have completely separate individual hobbies",
        insight="Reveals togetherness in interests vs independence",
        spice_level=1,
    ),
    WouldYouRatherQuestion(
        number=48,
        category="future",
        option_a="Build your own business/startup",
        option_b="Climb the corporate ladder to the top",
        insight="Reveals entrepreneurial spirit vs stability preference",
        spice_level=1,
    ),
    WouldYouRatherQuestion(
        number=49,
        category="future",
        option_a="Be famous and always in the spotlight",
        option_b="Be anonymous and live peacefully",
        insight="Reveals relationship with fame and privacy",
        spice_level=1,
    ),
    WouldYouRatherQuestion(
        number=50,
        category="future",
        option_a="Leave a legacy through your career/work",
        option_b="Leave a legacy through your family/children",
        insight="Reveals what matters most for long-term meaning",
        spice_level=2,
    ),
)

QUESTIONS_BY_NUMBER: dict[int, WouldYouRatherQuestion] = {q.number: q for q in QUESTIONS}
