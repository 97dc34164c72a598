"""Operations layer for the rando service.

- Search execution (SearchPipeline)
- Record generation (RandomRecordGenerator)
- Collection seeding (DataPopulator)

Principles:
- Single Responsibility Principle
- Dependency Injection
"""
