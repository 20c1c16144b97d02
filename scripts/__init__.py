"""
Вспомогательные скрипты проекта.

Модули:
- generate_datasets: генерация синтетических 2D-датасетов
- analyze_metrics: ускорение и эффективность по CSV метрик
"""
