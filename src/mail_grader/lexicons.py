# -*- coding: utf-8 -*-
"""
Default lexicons for the newsletter rule set.

These are deployment data, not logic. Every list can be replaced per
analysis through AnalysisOptions.
"""

# Spam trigger phrases (matched case-insensitively on word boundaries)
SPAM_PHRASES: tuple[str, ...] = (
    "act now", "act fast", "amazing", "apply now", "as seen on", "bargain",
    "best price", "bonus", "buy now", "call now", "cancel at any time",
    "cash", "clearance", "click here", "congratulations", "deal", "discount",
    "don't miss out", "double your", "earn extra cash", "earn rewards",
    "eliminate debt", "exclusive deal", "exclusive offer", "extra cash",
    "fantastic", "fast cash", "for free", "for instant access", "free trial",
    "free upgrade", "game-changer", "get it now", "get paid", "get rich",
    "giveaway", "great offer", "guaranteed", "incredible", "increase sales",
    "instant", "join millions", "limited seats", "limited-time",
    "limited time", "lowest price", "make money", "miracle", "money back",
    "no catch", "no cost", "no fees", "no gimmick", "no hidden costs",
    "no obligation", "now only", "offer expires", "once in a lifetime",
    "order now", "please read", "prize", "promise you", "pure profit",
    "revolutionary", "risk-free", "save big", "secret", "special promotion",
    "subscribe now", "supercharge", "unlimited", "urgent", "100% free",
    "winner", "work from home",
)

# Filler phrases, clichés and intensifiers
FLUFF_PHRASES: tuple[str, ...] = (
    "absolutely", "actually", "basically", "certainly", "completely",
    "definitely", "extremely", "honestly", "literally", "obviously", "quite",
    "really", "simply", "totally", "very", "just",
    "at the end of the day", "be consistent", "change the game",
    "go the extra mile", "in this day and age", "it goes without saying",
    "it's important to", "level up your", "make it happen",
    "needless to say", "think outside the box", "unlock your potential",
    "work smarter not harder", "your best self", "the sky's the limit",
    "in order to", "for all intents and purposes",
)

HEDGE_WORDS: tuple[str, ...] = (
    "might", "may", "could", "seems", "seem", "appears", "likely",
    "potentially", "possibly", "perhaps", "probably", "somewhat",
    "sort of", "kind of", "i think", "i believe", "we hope", "hopefully",
    "arguably",
)

VAGUE_DATES: tuple[str, ...] = (
    "soon", "recently", "nowadays", "these days", "as of late",
    "in the near future", "shortly", "sometime", "one of these days",
    "in the coming weeks", "in the coming months", "at some point",
    "later this year", "in a while",
)

VAGUE_QUANTITIES: tuple[str, ...] = (
    "a few", "a couple of", "several", "many", "lots of", "a lot of",
    "a number of", "numerous", "countless", "a handful of", "plenty of",
    "tons of", "a bunch of", "various", "a significant number of",
    "a large number of", "most people",
)

CTA_PHRASES: tuple[str, ...] = (
    "read more", "learn more", "sign up", "subscribe", "join now",
    "get started", "try it free", "try now", "download", "view full post",
    "claim offer", "book a demo", "register now", "reply to this email",
    "shop now", "check it out",
)

# Imperative verbs that make a sentence-leading call to action
ACTION_VERBS: tuple[str, ...] = (
    "book", "buy", "check", "claim", "click", "download", "explore", "get",
    "grab", "join", "learn", "read", "register", "reply", "reserve", "save",
    "share", "shop", "sign", "start", "subscribe", "try", "visit", "watch",
)

# Superlatives, absolutes and guarantee verbs that need evidence
CLAIM_TRIGGERS: tuple[str, ...] = (
    "best", "fastest", "biggest", "largest", "leading", "number one", "#1",
    "the only", "the first", "always", "never", "everyone", "everybody",
    "nobody", "proven", "guarantee", "guarantees", "guaranteed",
    "prove", "proves", "ensure", "ensures", "double", "triple",
    "unbeatable", "unmatched", "world-class", "best-in-class",
)

# Phrases that supply evidence next to a claim
EVIDENCE_PHRASES: tuple[str, ...] = (
    "according to", "source", "sources", "study", "studies", "survey",
    "report", "research", "data", "citation", "cited",
)

HEAVY_JARGON: tuple[str, ...] = (
    "paradigm shift", "synergize", "synergy", "omnichannel",
    "frictionless", "empowerment", "digital transformation",
    "mission-critical", "seamless integration", "strategic deployment",
    "thought leadership", "core competency", "value proposition",
    "move the needle", "circle back", "low-hanging fruit",
)

# Known misspellings -> correction
MISSPELLINGS: dict[str, str] = {
    "accross": "across",
    "acheive": "achieve",
    "accomodate": "accommodate",
    "adress": "address",
    "alot": "a lot",
    "arguement": "argument",
    "begining": "beginning",
    "beleive": "believe",
    "calender": "calendar",
    "definately": "definitely",
    "dissapoint": "disappoint",
    "embarass": "embarrass",
    "enviroment": "environment",
    "existance": "existence",
    "goverment": "government",
    "grammer": "grammar",
    "guarentee": "guarantee",
    "independant": "independent",
    "occured": "occurred",
    "occurence": "occurrence",
    "publically": "publicly",
    "recieve": "receive",
    "recomend": "recommend",
    "refered": "referred",
    "seperate": "separate",
    "succesful": "successful",
    "tommorow": "tomorrow",
    "truely": "truly",
    "untill": "until",
    "wich": "which",
    "wierd": "weird",
}

# Common acronyms that are not shouting
ACRONYMS: frozenset[str] = frozenset({
    "AI", "API", "CEO", "CTO", "CFO", "FAQ", "HTML", "HTTP", "HTTPS", "PDF",
    "ROI", "SEO", "SaaS", "SMS", "URL", "USA", "UK", "EU", "USD", "EUR",
    "GDPR", "FYI", "ASAP", "RSVP", "Q1", "Q2", "Q3", "Q4", "B2B", "B2C",
    "NASA", "FDA", "ISO", "NYC", "KPI", "OKR", "CRM", "CSS", "JSON", "SQL",
})

# Abbreviations (lowercase, no trailing period) that may be followed by a
# lowercase word without ending the sentence
ABBREVIATIONS: frozenset[str] = frozenset({
    "e.g", "i.e", "etc", "vs", "approx", "est", "dept", "fig", "incl",
    "no", "vol", "cf", "al", "ca", "min", "max", "avg", "jan", "feb", "mar",
    "apr", "jun", "jul", "aug", "sep", "sept", "oct", "nov", "dec",
})

# Titles that never end a sentence
HONORIFICS: frozenset[str] = frozenset({
    "mr", "mrs", "ms", "dr", "prof", "st", "jr", "sr", "rev", "gen", "sen",
    "rep", "gov", "capt", "lt", "col", "sgt",
})

# Stopwords ignored when comparing sentences for redundancy
STOPWORDS: frozenset[str] = frozenset({
    "the", "a", "an", "and", "or", "but", "if", "then", "so", "because",
    "as", "of", "to", "in", "on", "for", "with", "by", "at", "from", "that",
    "this", "these", "those", "is", "are", "was", "were", "be", "been", "it",
    "its", "you", "your", "we", "our", "they", "their", "i", "me", "my",
})
