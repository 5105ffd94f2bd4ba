"""Recommendation generator.

Remediation content lives in a lookup table keyed by (category, role) with a
Backend Developer fallback row. Adding a role or a category is a change to
RECOMMENDATION_TABLE, not to the control flow.

Action items stay parameterized (ActionItem.params) so the derived targets,
such as how many more reviews an agent needs, can be inspected without
parsing rendered text.
"""

from __future__ import annotations

import re
from string import Formatter
from typing import NamedTuple, Optional

from ..models.metrics import MetricsRecord
from ..models.plan import ActionItem, Category, Recommendation, RootCause
from ..models.policy import RecommendationPolicy

PRODUCT_OWNER = "Product Owner"
BACKEND_DEVELOPER = "Backend Developer"
FRONTEND_DEVELOPER = "Frontend Developer"
DEVOPS_ENGINEER = "DevOps Engineer"

KNOWN_ROLES = [PRODUCT_OWNER, BACKEND_DEVELOPER, FRONTEND_DEVELOPER, DEVOPS_ENGINEER]
FALLBACK_ROLE = BACKEND_DEVELOPER

# Checked in order; the first role with a matching keyword wins.
ROLE_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    (PRODUCT_OWNER, ("product", "po", "pm")),
    (FRONTEND_DEVELOPER, ("frontend", "front-end", "ui", "ux")),
    (DEVOPS_ENGINEER, ("devops", "infrastructure", "sre", "platform")),
    (BACKEND_DEVELOPER, ("backend", "back-end", "api")),
]


class RecommendationTemplate(NamedTuple):
    title: str
    actions: list[tuple[str, str]]


INSTRUCTIONS: dict[Category, list[str]] = {
    Category.PRODUCTIVITY: [
        'Add instruction: "Make frequent, atomic commits after each completed unit"',
        'Add checkpoint: "Commit code after implementing each function or component"',
        'Add workflow: "Always commit tests together with implementation"',
    ],
    Category.QUALITY: [
        'Add instruction: "Always write unit tests before implementation (TDD)"',
        'Add quality gate: "Run the linter and the full test suite before every commit"',
        'Add self-review step: "Review own code for edge cases and error handling"',
        'Add constraint: "Maximum cyclomatic complexity: 10 per function"',
    ],
    Category.COLLABORATION: [
        'Add workflow: "Review {reviews_needed} open PRs before creating your own"',
        'Add guideline: "Focus reviews on logic, edge cases, and test coverage"',
        'Add learning: "Note patterns and techniques used by high-performing agents"',
    ],
    Category.RELIABILITY: [
        'Add discipline: "Complete one task fully before starting another"',
        'Add workflow: "If task takes > 4 hours, break into subtasks"',
        'Add communication: "Report blockers within 30 minutes of identification"',
    ],
}

EXPECTED_IMPACT: dict[Category, str] = {
    Category.PRODUCTIVITY: "+20% productivity score",
    Category.QUALITY: "+30% quality score",
    Category.COLLABORATION: "+15% collaboration score",
    Category.RELIABILITY: "+10% reliability score",
}

RECOMMENDATION_TABLE: dict[tuple[Category, str], RecommendationTemplate] = {
    # Product Owner
    (Category.QUALITY, PRODUCT_OWNER): RecommendationTemplate("Requirements Quality", [
        ("Acceptance Criteria", "Define clear, testable acceptance criteria for every user story"),
        ("User Story Format", 'Follow "As a [user], I want [goal] so that [benefit]" structure'),
        ("Definition of Done", "Ensure all stories have explicit DoD before sprint planning"),
        ("Validation", "Review stories with stakeholders before marking as ready for development"),
    ]),
    (Category.PRODUCTIVITY, PRODUCT_OWNER): RecommendationTemplate("Backlog Management", [
        ("Refinement Cadence", "Conduct backlog refinement sessions {commits_needed}+ times per sprint"),
        ("Story Sizing", "Ensure all upcoming stories are estimated and prioritized"),
        ("Sprint Planning", "Prepare sprint goals and prioritized backlog items in advance"),
        ("Stakeholder Sync", "Schedule regular check-ins with business stakeholders"),
    ]),
    (Category.COLLABORATION, PRODUCT_OWNER): RecommendationTemplate("Stakeholder Engagement", [
        ("Communication", "Provide clear product vision and roadmap updates to the team"),
        ("Feedback Loops", "Gather and incorporate feedback from {reviews_needed}+ team members"),
        ("Alignment", "Ensure technical team understands business value of each feature"),
        ("Demo Preparation", "Actively participate in sprint demos and retrospectives"),
    ]),
    (Category.RELIABILITY, PRODUCT_OWNER): RecommendationTemplate("Product Delivery", [
        ("Scope Management", "Prevent scope creep by clearly defining MVP requirements"),
        ("Dependency Tracking", "Identify and document external dependencies early"),
        ("Risk Assessment", "Flag high-risk items during planning"),
        ("Release Planning", "Maintain updated release roadmap with realistic timelines"),
    ]),
    # Backend Developer (fallback row)
    (Category.QUALITY, BACKEND_DEVELOPER): RecommendationTemplate("Code Quality & Testing", [
        ("Unit Tests", "Write comprehensive unit tests for all API endpoints and business logic"),
        ("Integration Tests", "Add integration tests covering database interactions"),
        ("Code Coverage", "Maintain minimum 80% test coverage for backend services"),
        ("Static Analysis", "Run the linter and fix all errors before committing"),
        ("Error Handling", "Implement proper error handling with appropriate HTTP status codes"),
    ]),
    (Category.PRODUCTIVITY, BACKEND_DEVELOPER): RecommendationTemplate("Development Velocity", [
        ("Commit Frequency", "Make {commits_needed}+ atomic commits per sprint"),
        ("API Documentation", "Document all new endpoints using OpenAPI/Swagger"),
        ("Code Reusability", "Identify and extract common patterns into shared modules"),
        ("Performance", "Profile and optimize database queries and API response times"),
    ]),
    (Category.COLLABORATION, BACKEND_DEVELOPER): RecommendationTemplate("Team Collaboration", [
        ("Code Reviews", "Review {reviews_needed}+ backend PRs focusing on architecture"),
        ("API Contracts", "Coordinate with frontend team on API contract changes"),
        ("Knowledge Sharing", "Document complex business logic and architectural decisions"),
        ("Technical Discussions", "Participate in architecture reviews and design sessions"),
    ]),
    (Category.RELIABILITY, BACKEND_DEVELOPER): RecommendationTemplate("System Reliability", [
        ("Error Monitoring", "Implement comprehensive logging and error tracking"),
        ("Database Migrations", "Test all migrations thoroughly before deployment"),
        ("Backward Compatibility", "Ensure API changes don't break existing clients"),
        ("Performance Testing", "Load test critical endpoints before production deployment"),
    ]),
    # Frontend Developer
    (Category.QUALITY, FRONTEND_DEVELOPER): RecommendationTemplate("UI/UX Quality", [
        ("Component Testing", "Write unit tests for all UI components"),
        ("E2E Tests", "Add end-to-end tests for critical user flows"),
        ("Accessibility", "Ensure WCAG 2.1 AA compliance for all UI components"),
        ("Browser Testing", "Test across Chrome, Firefox, Safari, and Edge"),
        ("Code Review", "Check for proper error boundaries and loading states"),
    ]),
    (Category.PRODUCTIVITY, FRONTEND_DEVELOPER): RecommendationTemplate("Frontend Velocity", [
        ("Component Commits", "Make {commits_needed}+ commits per sprint"),
        ("Reusable Components", "Build atomic, reusable UI components"),
        ("Performance", "Optimize bundle size and implement code splitting"),
        ("Styling Standards", "Follow design system and maintain consistent styling approach"),
    ]),
    (Category.COLLABORATION, FRONTEND_DEVELOPER): RecommendationTemplate("Cross-functional Collaboration", [
        ("Design Review", "Review {reviews_needed}+ UI/UX implementations from team"),
        ("API Integration", "Coordinate with backend team on data requirements"),
        ("UX Feedback", "Gather and incorporate user feedback from Product Owner"),
        ("Design System", "Contribute to and maintain shared component library"),
    ]),
    (Category.RELIABILITY, FRONTEND_DEVELOPER): RecommendationTemplate("Frontend Reliability", [
        ("Error Handling", "Implement error boundaries and user-friendly error messages"),
        ("Form Validation", "Add client-side validation with clear validation messages"),
        ("Loading States", "Show appropriate loading indicators for async operations"),
        ("Responsive Design", "Ensure mobile responsiveness across all screen sizes"),
    ]),
    # DevOps Engineer
    (Category.QUALITY, DEVOPS_ENGINEER): RecommendationTemplate("Infrastructure Quality", [
        ("Infrastructure as Code", "Write tests for Terraform/CloudFormation templates"),
        ("CI/CD Validation", "Implement pre-deployment validation checks"),
        ("Security Scanning", "Add automated security scanning to CI/CD pipeline"),
        ("Configuration Management", "Validate all configuration changes before deployment"),
        ("Documentation", "Document all infrastructure changes and runbooks"),
    ]),
    (Category.PRODUCTIVITY, DEVOPS_ENGINEER): RecommendationTemplate("Automation Efficiency", [
        ("Pipeline Improvements", "Make {commits_needed}+ automation commits per sprint"),
        ("Build Optimization", "Reduce CI/CD pipeline execution time"),
        ("Deployment Automation", "Automate manual deployment steps"),
        ("Monitoring Setup", "Implement comprehensive monitoring and alerting"),
    ]),
    (Category.COLLABORATION, DEVOPS_ENGINEER): RecommendationTemplate("DevOps Collaboration", [
        ("Infrastructure Reviews", "Review {reviews_needed}+ infrastructure PRs"),
        ("Developer Support", "Provide timely support for deployment and infrastructure issues"),
        ("Knowledge Transfer", "Document and train team on CI/CD processes"),
        ("Incident Response", "Participate in incident response and post-mortems"),
    ]),
    (Category.RELIABILITY, DEVOPS_ENGINEER): RecommendationTemplate("Platform Reliability", [
        ("High Availability", "Implement redundancy and failover mechanisms"),
        ("Disaster Recovery", "Test backup and recovery procedures regularly"),
        ("Performance Monitoring", "Set up and monitor SLAs and SLOs"),
        ("Incident Management", "Create and maintain incident response playbooks"),
    ]),
}


def resolve_role(role: Optional[str]) -> str:
    """Map a free-form role tag onto one of KNOWN_ROLES."""
    if not role:
        return FALLBACK_ROLE
    normalized = role.strip().lower()
    for known in KNOWN_ROLES:
        if normalized == known.lower():
            return known
    words = set(re.findall(r"[a-z]+(?:-[a-z]+)?", normalized))
    for known, keywords in ROLE_KEYWORDS:
        if words.intersection(keywords):
            return known
    return FALLBACK_ROLE


def lookup_template(category: Category, role: str) -> RecommendationTemplate:
    template = RECOMMENDATION_TABLE.get((category, role))
    if template is None:
        template = RECOMMENDATION_TABLE[(category, FALLBACK_ROLE)]
    return template


def derived_targets(
    metrics: MetricsRecord,
    role: str,
    policy: RecommendationPolicy,
) -> dict[str, int]:
    """Numbers that personalize advice to the agent's current gap."""
    commit_floor = (
        policy.product_owner_commit_floor if role == PRODUCT_OWNER else policy.commit_floor
    )
    return {
        "commits_needed": max(policy.commit_goal - metrics.commits, commit_floor),
        "reviews_needed": max(policy.review_goal - metrics.code_reviews, policy.review_floor),
    }


def _template_fields(text: str) -> set[str]:
    return {field for _, field, _, _ in Formatter().parse(text) if field}


def recommend(
    root_causes: list[RootCause],
    metrics: MetricsRecord,
    policy: Optional[RecommendationPolicy] = None,
) -> list[Recommendation]:
    """One recommendation per root cause, in root-cause order."""
    policy = policy or RecommendationPolicy()
    role = resolve_role(metrics.role)
    targets = derived_targets(metrics, role, policy)

    recommendations: list[Recommendation] = []
    for cause in root_causes:
        template = lookup_template(cause.category, role)
        actions = [
            ActionItem(
                label=label,
                template=text,
                params={k: targets[k] for k in _template_fields(text)},
            )
            for label, text in template.actions
        ]
        recommendations.append(
            Recommendation(
                priority=cause.severity,
                category=cause.category,
                title=template.title,
                role=role,
                actions=actions,
                instructions=[i.format(**targets) for i in INSTRUCTIONS[cause.category]],
                expected_impact=EXPECTED_IMPACT[cause.category],
            )
        )

    return recommendations
