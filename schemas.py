# Schemas JSON das saídas estruturadas pedidas ao modelo.
# CHUNK_OUTPUT_SCHEMA também vai como `format` na config do provider.

CHUNK_OUTPUT_SCHEMA = {
    "type": "object",
    "properties": {
        "keyPoints": {"type": "array", "items": {"type": "string"}},
        "quotes": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "startIndex": {"type": "integer"},
                    "endIndex": {"type": "integer"},
                    "context": {"type": "string"},
                    "significance": {"type": "string", "enum": ["high", "medium", "low"]},
                },
                "required": ["startIndex", "endIndex", "context", "significance"],
            },
        },
        "stanceSignals": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "topic": {"type": "string"},
                    "position": {"type": "string"},
                    "strength": {"type": "string", "enum": ["strong", "moderate", "weak"]},
                },
                "required": ["topic", "position", "strength"],
            },
        },
        "topics": {"type": "array", "items": {"type": "string"}},
        "tone": {"type": "string"},
    },
    "required": ["keyPoints", "quotes", "stanceSignals", "topics", "tone"],
}

META_OUTPUT_SCHEMA = {
    "type": "object",
    "properties": {
        "politicalStance": {
            "type": "string",
            "enum": ["Far Left", "Left-leaning", "Centrist", "Right-leaning", "Far Right"],
        },
        "paragraphSummary": {"type": "string"},
        "summary": {"type": "string"},
        "bulletPointsSummary": {"type": "array", "items": {"type": "string"}},
        "analysisConfidence": {"type": "string", "enum": ["high", "medium", "low"]},
        "stanceExplanation": {"type": "string"},
        "topQuotes": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "text": {"type": "string"},
                    "context": {"type": "string"},
                },
                "required": ["text", "context"],
            },
        },
        "topics": {"type": "array", "items": {"type": "string"}},
    },
    "required": [
        "politicalStance",
        "paragraphSummary",
        "summary",
        "bulletPointsSummary",
        "analysisConfidence",
        "stanceExplanation",
        "topQuotes",
        "topics",
    ],
}

OUTPUT_SCHEMAS = {
    "chunk-analysis": CHUNK_OUTPUT_SCHEMA,
    "meta-analysis": META_OUTPUT_SCHEMA,
}
