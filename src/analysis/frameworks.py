"""Framework/tool detection dictionary and manifest parsing."""

import json
import re
from typing import Iterable

# Canonical framework name -> lower-case substring patterns
FRAMEWORK_PATTERNS: dict[str, list[str]] = {
    # JavaScript / TypeScript
    "React": ["react", "jsx", "tsx", "react-dom", "next.js", "gatsby"],
    "Vue.js": ["vue", "vuejs", "nuxt", "vue-cli", "vite"],
    "Angular": ["angular", "@angular", "ng", "angular-cli"],
    "Node.js": ["node", "nodejs", "express", "koa", "fastify", "nest"],
    "Svelte": ["svelte", "sveltekit"],
    # Python
    "Django": ["django", "django-rest-framework"],
    "Flask": ["flask", "flask-restful"],
    "FastAPI": ["fastapi", "starlette"],
    "Pandas": ["pandas", "numpy", "scipy"],
    "TensorFlow": ["tensorflow", "tf", "keras"],
    "PyTorch": ["torch", "pytorch", "torchvision"],
    # Java
    "Spring": ["spring", "spring-boot", "spring-framework"],
    "Spring Boot": ["spring-boot", "springboot"],
    # C#
    ".NET": ["dotnet", ".net", "aspnet", "asp.net"],
    "ASP.NET": ["aspnet", "asp.net"],
    # PHP
    "Laravel": ["laravel", "artisan"],
    "Symfony": ["symfony"],
    "CodeIgniter": ["codeigniter"],
    # Ruby
    "Ruby on Rails": ["rails", "ruby-on-rails", "ror"],
    # Go
    "Gin": ["gin-gonic", "gin"],
    "Echo": ["echo"],
    "Fiber": ["fiber"],
    # Databases and infrastructure
    "Docker": ["docker", "dockerfile", "docker-compose"],
    "Kubernetes": ["kubernetes", "k8s", "kubectl"],
    "MongoDB": ["mongodb", "mongo", "mongoose"],
    "PostgreSQL": ["postgresql", "postgres", "pg"],
    "MySQL": ["mysql"],
    "Redis": ["redis"],
    "GraphQL": ["graphql", "apollo"],
    "REST API": ["rest", "api", "restful"],
    # Frontend tooling
    "Webpack": ["webpack"],
    "Vite": ["vite"],
    "Tailwind CSS": ["tailwind", "tailwindcss"],
    "Bootstrap": ["bootstrap"],
    "Sass/SCSS": ["sass", "scss"],
    # Testing
    "Jest": ["jest"],
    "Cypress": ["cypress"],
    "Pytest": ["pytest"],
    "JUnit": ["junit"],
    # Cloud and DevOps
    "AWS": ["aws", "amazon-web-services"],
    "Azure": ["azure", "microsoft-azure"],
    "Google Cloud": ["gcp", "google-cloud"],
    "Terraform": ["terraform"],
    "Jenkins": ["jenkins"],
    "GitHub Actions": ["github-actions", "actions"],
}

_REQUIREMENT_SPLIT = re.compile(r"[<>=!~;\[\s]")


def match_frameworks(text: str) -> set[str]:
    """Frameworks whose patterns occur in ``text`` (first pattern hit wins)."""
    text = text.lower()
    found = set()
    for framework, patterns in FRAMEWORK_PATTERNS.items():
        for pattern in patterns:
            if pattern in text:
                found.add(framework)
                break
    return found


def match_frameworks_in(texts: Iterable[str]) -> set[str]:
    """Union of matches across several texts, one hit per framework."""
    found: set[str] = set()
    for text in texts:
        if text:
            found |= match_frameworks(text)
    return found


def parse_package_json(content: str) -> list[str]:
    """Dependency names from dependencies, devDependencies and peerDependencies."""
    data = json.loads(content)
    if not isinstance(data, dict):
        return []
    names: list[str] = []
    for section in ("dependencies", "devDependencies", "peerDependencies"):
        deps = data.get(section)
        if isinstance(deps, dict):
            names.extend(name for name in deps if name not in names)
    return names


def parse_requirements(content: str) -> list[str]:
    """Package names from a requirements.txt, version specifiers stripped."""
    names = []
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith(("#", "-")):
            continue
        name = _REQUIREMENT_SPLIT.split(line, maxsplit=1)[0].strip()
        if name:
            names.append(name)
    return names
