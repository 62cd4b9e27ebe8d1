"""
Built-in skills taxonomy and variation tables.

Plain data only. `skillmatch.skills.vocabulary.default_vocabulary()` freezes these
into a SkillVocabulary once; nothing else should import the tables directly.
"""
from __future__ import annotations

from typing import Dict, Tuple

SKILL_CATEGORIES: Dict[str, Tuple[str, ...]] = {
    "programming": (
        "javascript", "js", "typescript", "ts", "python", "java", "c++", "c#", "csharp",
        "php", "ruby", "go", "golang", "rust", "swift", "kotlin", "scala", "r",
        "matlab", "perl", "shell", "bash", "powershell", "objective-c", "dart",
        "elixir", "erlang", "haskell", "clojure", "f#", "visual basic", "vb.net",
        "assembly", "cobol", "fortran", "lua", "groovy", "solidity", "sql",
    ),
    "frontend": (
        "react", "react.js", "reactjs", "angular", "angularjs", "vue", "vue.js", "vuejs",
        "svelte", "ember", "ember.js", "next.js", "nextjs", "nuxt", "nuxt.js", "gatsby",
        "html", "html5", "css", "css3", "sass", "scss", "less", "stylus",
        "bootstrap", "tailwind", "tailwind css", "material ui", "mui", "chakra ui",
        "styled components", "emotion", "jquery", "backbone.js", "knockout.js",
        "webpack", "vite", "parcel", "rollup", "gulp", "grunt", "babel", "redux", "graphql",
    ),
    "backend": (
        "node.js", "nodejs", "express", "express.js", "koa", "fastify", "nest.js", "nestjs",
        "django", "flask", "fastapi", "spring", "spring boot", "springboot",
        "asp.net", "asp.net core", ".net", "dotnet", "laravel", "symfony", "codeigniter",
        "ruby on rails", "rails", "sinatra", "phoenix", "gin", "echo", "fiber",
        "actix", "rocket", "vapor", "kitura", "play framework", "rest", "grpc", "microservices",
    ),
    "databases": (
        "mysql", "postgresql", "postgres", "sqlite", "oracle", "sql server", "mssql",
        "mongodb", "mongoose", "redis", "elasticsearch", "cassandra", "dynamodb",
        "firestore", "firebase", "supabase", "planetscale", "cockroachdb",
        "neo4j", "arangodb", "couchdb", "rethinkdb", "influxdb", "timescaledb",
        "mariadb", "aurora", "snowflake", "bigquery", "redshift", "databricks",
    ),
    "cloud": (
        "aws", "amazon web services", "azure", "microsoft azure", "google cloud", "gcp",
        "google cloud platform", "heroku", "vercel", "netlify", "digitalocean",
        "linode", "vultr", "cloudflare", "fastly", "cdn", "content delivery network",
        "lambda", "azure functions", "google functions", "cloud functions",
        "s3", "blob storage", "cloud storage", "ec2", "compute engine", "app service",
        "elastic beanstalk", "cloud run", "fargate", "ecs", "aks", "eks", "gke",
    ),
    "devops": (
        "docker", "kubernetes", "k8s", "helm", "jenkins", "gitlab ci", "github actions",
        "circle ci", "travis ci", "azure devops", "terraform", "ansible", "chef",
        "puppet", "vagrant", "packer", "consul", "vault", "nomad", "prometheus",
        "grafana", "elk stack", "logstash", "kibana", "datadog",
        "new relic", "splunk", "nginx", "apache", "haproxy", "istio", "envoy",
        "ci/cd", "continuous integration", "linux",
    ),
    "version_control": (
        "git", "github", "gitlab", "bitbucket", "svn", "mercurial", "perforce",
        "source control", "version control", "git flow", "github flow",
    ),
    "mobile": (
        "ios development", "android development", "react native", "flutter", "xamarin",
        "ionic", "cordova", "phonegap", "swift ui", "jetpack compose", "kotlin multiplatform",
        "unity", "unreal engine", "xcode", "android studio",
    ),
    "data_science": (
        "machine learning", "ml", "deep learning", "artificial intelligence", "ai",
        "data science", "data analysis", "data analytics", "big data", "pandas",
        "numpy", "scipy", "matplotlib", "seaborn", "plotly", "scikit-learn", "sklearn",
        "tensorflow", "keras", "pytorch", "opencv", "nlp", "natural language processing",
        "computer vision", "neural networks", "regression", "classification", "clustering",
        "jupyter", "google colab", "anaconda", "conda", "spark", "hadoop", "kafka",
        "airflow", "dbt", "tableau", "power bi", "looker", "qlik", "r studio",
    ),
    "testing": (
        "unit testing", "integration testing", "e2e testing", "test automation",
        "jest", "mocha", "chai", "jasmine", "karma", "cypress", "selenium",
        "playwright", "puppeteer", "webdriver", "junit", "testng", "pytest",
        "rspec", "minitest", "postman", "insomnia", "newman",
        "cucumber", "behave", "specflow", "tdd", "bdd", "quality assurance", "qa",
    ),
    "security": (
        "cybersecurity", "information security", "penetration testing", "ethical hacking",
        "vulnerability assessment", "security audit", "owasp", "ssl", "tls",
        "encryption", "authentication", "authorization", "oauth", "jwt", "saml",
        "ldap", "active directory", "kerberos", "pki", "firewall", "intrusion detection",
        "siem", "incident response", "forensics", "malware analysis", "reverse engineering",
    ),
    "management": (
        "agile", "scrum", "kanban", "waterfall", "lean", "six sigma", "prince2",
        "pmp", "project management", "product management", "product owner", "scrum master",
        "stakeholder management", "risk management", "budget management",
        "jira", "confluence", "trello", "asana", "monday.com", "notion", "slack",
        "microsoft teams", "miro",
    ),
    "design": (
        "ui design", "ux design", "user interface", "user experience", "interaction design",
        "visual design", "graphic design", "web design", "mobile design", "responsive design",
        "wireframing", "prototyping", "user research", "usability testing", "accessibility",
        "figma", "sketch", "adobe xd", "invision", "zeplin", "framer",
        "adobe photoshop", "adobe illustrator", "adobe after effects", "canva",
    ),
    "soft": (
        "communication", "teamwork", "leadership", "problem solving", "critical thinking",
        "creativity", "adaptability", "time management", "attention to detail",
        "collaboration", "mentoring", "coaching", "public speaking", "presentation skills",
        "negotiation", "conflict resolution", "emotional intelligence", "customer service",
        "business analysis", "strategic thinking",
    ),
}

# alias -> canonical. Chains are allowed here; the vocabulary resolves them
# to a fixed point so normalization stays idempotent.
SKILL_ALIASES: Dict[str, str] = {
    # languages
    "js": "javascript",
    "ts": "typescript",
    "py": "python",
    "python3": "python",
    "golang": "go",
    "c sharp": "c#",
    "csharp": "c#",
    "c plus plus": "c++",
    "cplusplus": "c++",
    "cpp": "c++",
    "objective c": "objective-c",
    "objc": "objective-c",
    # frameworks
    "reactjs": "react",
    "react.js": "react",
    "react js": "react",
    "vuejs": "vue.js",
    "vue": "vue.js",
    "angularjs": "angular",
    "angular.js": "angular",
    "nodejs": "node.js",
    "node": "node.js",
    "expressjs": "express",
    "express.js": "express",
    "nextjs": "next.js",
    "nuxtjs": "nuxt.js",
    "nuxt": "nuxt.js",
    "nestjs": "nest.js",
    "ember": "ember.js",
    "springboot": "spring boot",
    "dotnet": ".net",
    "rails": "ruby on rails",
    "html5": "html",
    "css3": "css",
    "sklearn": "scikit-learn",
    # databases
    "postgres": "postgresql",
    "mongo": "mongodb",
    "mssql": "sql server",
    # cloud
    "amazon web services": "aws",
    "aws cloud": "aws",
    "microsoft azure": "azure",
    "google cloud platform": "google cloud",
    "gcp": "google cloud",
    # devops
    "k8s": "kubernetes",
    "docker containers": "docker",
    "containerization": "docker",
    "cicd": "ci/cd",
    "ci cd": "ci/cd",
    "ci/cd": "continuous integration",
    # data / ai
    "ml": "machine learning",
    "ai": "artificial intelligence",
    "nlp": "natural language processing",
    # apis / roles
    "rest api": "rest",
    "restful": "rest",
    "restful api": "rest",
    "ui/ux": "ui ux design",
    "frontend": "front-end development",
    "front-end": "front-end development",
    "backend": "back-end development",
    "back-end": "back-end development",
    "fullstack": "full-stack development",
    "full stack": "full-stack development",
    "full-stack": "full-stack development",
}

# "<skill> <version>" mentions, e.g. "react 18", "python 3.9", "javascript es6".
# Group 1 is the skill.
VERSION_PATTERNS: Tuple[str, ...] = (
    r"\b(react|angular|vue|python|java|node\.js|php|django|spring boot|\.net)\s+v?\d+(?:\.\d+)*\b",
    r"\b(javascript|typescript)\s+(?:es\d+|es20\d{2})\b",
)

# File-extension cues: a "*.py" or "foo.py" mention implies the language.
EXTENSION_SKILLS: Dict[str, str] = {
    "js": "javascript",
    "ts": "typescript",
    "py": "python",
    "java": "java",
    "php": "php",
    "rb": "ruby",
    "go": "go",
    "rs": "rust",
    "swift": "swift",
    "kt": "kotlin",
    "scala": "scala",
}

# Fixed acronym / compound expansions that are not plain aliases of a term.
ACRONYM_EXPANSIONS: Dict[str, str] = {
    "es6": "javascript",
    "es2015": "javascript",
    "es2020": "javascript",
    "aws lambda": "aws",
    "azure devops": "azure",
    "google cloud": "gcp",
}
