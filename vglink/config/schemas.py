"""Policy file schema for vglink."""

_REPOSITORY_SPEC_SCHEMA = {
    "type": "object",
    "properties": {
        "buildKey": {
            "type": "string",
            "pattern": r"^[A-Za-z0-9_]+$",
            "maxLength": 255,
            "description": "CI/CD variable that receives the token",
        },
        "enabled": {
            "type": "boolean",
            "description": "Whether tokens are issued for matching projects",
        },
        "renewPeriod": {
            "type": "string",
            "description": "How often a fresh token is issued, e.g. 30m, 1h, 1h30m",
        },
    },
    "additionalProperties": False,
}

_LINK_SPEC_SCHEMA = {
    "type": ["object", "null"],
    "properties": {
        "repositorySpec": {"oneOf": [_REPOSITORY_SPEC_SCHEMA, {"type": "null"}]},
        "tokenSpec": {
            "type": ["object", "null"],
            "description": "Vault token-create request, passed through unchanged",
        },
    },
    "additionalProperties": False,
}

POLICY_CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "default": {
            "type": "object",
            "properties": {
                "repositorySpec": _REPOSITORY_SPEC_SCHEMA,
                "tokenSpec": {"type": "object"},
            },
            "required": ["repositorySpec", "tokenSpec"],
            "additionalProperties": False,
        },
        "groups": {
            "type": ["object", "null"],
            "additionalProperties": {
                "type": ["object", "null"],
                "properties": {
                    "default": _LINK_SPEC_SCHEMA,
                    "projects": {
                        "type": ["object", "null"],
                        "additionalProperties": _LINK_SPEC_SCHEMA,
                    },
                },
                "additionalProperties": False,
            },
        },
    },
    "required": ["default"],
    "additionalProperties": False,
}
