"""Fixed demo data set loaded by ``POST /api/seed``."""
from __future__ import annotations

from typing import List, NamedTuple


class DemoFeedback(NamedTuple):
    source: str
    author: str
    content: str


DEMO_FEEDBACK: List[DemoFeedback] = [
    DemoFeedback(
        "discord",
        "developer_jane",
        "The new Workers AI integration is amazing! I was able to build a sentiment analysis tool in under an hour. Documentation was clear and examples were helpful.",
    ),
    DemoFeedback(
        "discord",
        "cloudflare_fan",
        "Having issues with D1 database connections timing out intermittently. Anyone else experiencing this? It's affecting our production app.",
    ),
    DemoFeedback(
        "discord",
        "startup_dev",
        "Wrangler CLI keeps crashing when I try to deploy. Error message isn't helpful at all. Spent 2 hours debugging this.",
    ),
    DemoFeedback(
        "github",
        "open-source-contributor",
        "Feature request: Please add support for WebSocket connections in Workers. This would enable real-time applications without workarounds.",
    ),
    DemoFeedback(
        "github",
        "enterprise_user",
        "Bug: KV namespace not syncing across regions. Data written in US is not immediately available in EU. This is blocking our global deployment.",
    ),
    DemoFeedback(
        "github",
        "security_researcher",
        "Security concern: The default CORS settings are too permissive. Should have stricter defaults with opt-in for relaxed policies.",
    ),
    DemoFeedback(
        "support",
        "enterprise_client",
        "URGENT: Our Workers are returning 502 errors for 15% of requests since the last platform update. Revenue impact is significant. Need immediate assistance.",
    ),
    DemoFeedback(
        "support",
        "small_business",
        "Billing question: We were charged for Workers usage but our dashboard shows zero requests. Can someone explain the discrepancy?",
    ),
    DemoFeedback(
        "support",
        "new_customer",
        "Great onboarding experience! The free tier was perfect for prototyping. Just upgraded to paid plan. Quick suggestion: add more code templates.",
    ),
    DemoFeedback(
        "twitter",
        "@tech_reviewer",
        "Just tried @Cloudflare Workers for the first time. Deploy times are incredible - under 1 second! The future of serverless is here.",
    ),
    DemoFeedback(
        "twitter",
        "@frustrated_dev",
        "@Cloudflare your documentation for Pages is outdated. Half the examples don't work. Please update or add version numbers.",
    ),
    DemoFeedback(
        "twitter",
        "@startup_cto",
        "Moved our entire API from AWS Lambda to @Cloudflare Workers. 60% cost reduction and better latency. Highly recommend!",
    ),
    DemoFeedback(
        "email",
        "potential_customer@company.com",
        "We're evaluating Cloudflare for our enterprise needs. Main concern is the 128MB memory limit for Workers. Are there plans to increase this?",
    ),
    DemoFeedback(
        "email",
        "partner@agency.com",
        "Our agency builds on Cloudflare. Would love better white-labeling options for the dashboard. Clients want their branding.",
    ),
    DemoFeedback(
        "forum",
        "community_helper",
        "Tutorial suggestion: Need more content on debugging Workers in production. The current logging is minimal and hard to work with.",
    ),
    DemoFeedback(
        "forum",
        "power_user",
        "Been using Cloudflare for 3 years. The R2 storage is a game-changer. Zero egress fees saved us thousands monthly.",
    ),
    DemoFeedback(
        "forum",
        "new_developer",
        "Confused about the difference between Workers and Pages. Documentation assumes prior knowledge. Need a clearer comparison guide.",
    ),
    DemoFeedback(
        "discord",
        "ml_engineer",
        "Workers AI model selection is limited. Would love to see more specialized models for code generation and analysis.",
    ),
    DemoFeedback(
        "github",
        "performance_tester",
        "Noticed cold start times increased after recent update. P99 latency went from 50ms to 200ms. Can you investigate?",
    ),
    DemoFeedback(
        "support",
        "migration_customer",
        "Migrating from Vercel. The process is smooth but missing import tool for environment variables. Had to manually copy 50+ vars.",
    ),
]
