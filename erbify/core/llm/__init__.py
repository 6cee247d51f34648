"""
Translation service access.

    - base: abstract provider and response container
    - providers: concrete service implementations
    - client: prompt building and answer cleanup around a provider
"""
