"""Deterministic fallback generator.

Used when the live backend is not configured (mock mode, the "mock"
credential, or no credential) and when the live backend reports a low
account balance. The task's content is ignored: the generator always emits
the same small demonstration project, a TypeScript mystery-shopper report
tool, so offline runs exercise the full submission path with stable paths.
"""

import logging
from typing import List, Optional, Tuple

from autocoder.analysis.models import TaskDescription
from autocoder.generation.models import FileEdit, FileSet


logger = logging.getLogger(__name__)


TYPES_TS = """/**
 * Mystery shopper report types
 */

export interface MysteryShopperReport {
  id: string;
  shopName: string;
  visitDate: Date;
  inspector: string;

  ratings: {
    serviceQuality: number; // 1-5
    cleanliness: number; // 1-5
    staffAttitude: number; // 1-5
    productQuality: number; // 1-5
    atmosphere: number; // 1-5
  };

  comments: {
    strengths: string[];
    improvements: string[];
    generalFeedback: string;
  };

  recommendations: string[];
  repeatIntention: 'high' | 'medium' | 'low';

  createdAt: Date;
  updatedAt: Date;
}

export interface ReportSummary {
  averageRating: number;
  totalReports: number;
  repeatRate: number;
  topStrengths: string[];
  topImprovements: string[];
}"""


REPORT_GENERATOR_TS = """import type { MysteryShopperReport, ReportSummary } from './types.js';

type NewReport = Omit<MysteryShopperReport, 'id' | 'createdAt' | 'updatedAt'>;

export class ReportGenerator {
  private reports: MysteryShopperReport[] = [];

  createReport(data: NewReport): MysteryShopperReport {
    const now = new Date();
    const report: MysteryShopperReport = {
      ...data,
      id: this.generateId(),
      createdAt: now,
      updatedAt: now,
    };
    this.reports.push(report);
    return report;
  }

  generateSummary(): ReportSummary {
    if (this.reports.length === 0) {
      return {
        averageRating: 0,
        totalReports: 0,
        repeatRate: 0,
        topStrengths: [],
        topImprovements: [],
      };
    }

    const totalRating = this.reports.reduce((sum, report) => {
      const r = report.ratings;
      const avg = (r.serviceQuality + r.cleanliness + r.staffAttitude +
                   r.productQuality + r.atmosphere) / 5;
      return sum + avg;
    }, 0);

    const highRepeat = this.reports.filter(r => r.repeatIntention === 'high').length;

    return {
      averageRating: totalRating / this.reports.length,
      totalReports: this.reports.length,
      repeatRate: (highRepeat / this.reports.length) * 100,
      topStrengths: this.topItems('strengths'),
      topImprovements: this.topItems('improvements'),
    };
  }

  private generateId(): string {
    // Timestamp plus random suffix, unique per created report
    return `REPORT-${Date.now()}-${Math.random().toString(36).slice(2, 11)}`;
  }

  private topItems(kind: 'strengths' | 'improvements'): string[] {
    const counts = new Map<string, number>();
    for (const item of this.reports.flatMap(r => r.comments[kind])) {
      counts.set(item, (counts.get(item) ?? 0) + 1);
    }
    return [...counts.entries()]
      .sort(([, a], [, b]) => b - a)
      .slice(0, 5)
      .map(([item]) => item);
  }
}"""


INDEX_TS = """import { ReportGenerator } from './report-generator.js';

export { ReportGenerator };
export type { MysteryShopperReport, ReportSummary } from './types.js';

export function runSample(): void {
  const generator = new ReportGenerator();

  generator.createReport({
    shopName: 'Cafe de Paris, Shibuya',
    visitDate: new Date('2026-02-08'),
    inspector: 'Inspector A',
    ratings: {
      serviceQuality: 5,
      cleanliness: 4,
      staffAttitude: 5,
      productQuality: 4,
      atmosphere: 5,
    },
    comments: {
      strengths: ['Friendly staff', 'Very clean store', 'Fast service'],
      improvements: ['More detailed menu descriptions', 'Faster Wi-Fi'],
      generalFeedback: 'Highly satisfying visit overall.',
    },
    recommendations: [
      'Roll out the staff training program to other stores',
      'Introduce menu description cards',
    ],
    repeatIntention: 'high',
  });

  const summary = generator.generateSummary();
  console.log(`Average rating: ${summary.averageRating.toFixed(2)}/5.0`);
  console.log(`Repeat intention: ${summary.repeatRate.toFixed(1)}%`);
}"""


README_MD = """# Mystery Shopper Report System

Create and analyze mystery shopper reports to improve customer satisfaction
and repeat visits.

## Features

- Create and manage mystery shopper reports
- Five-point rating scale
- Strength and improvement extraction
- Summary analysis (average rating, repeat rate)

## Usage

```typescript
import { ReportGenerator } from './src/report-generator.js';

const generator = new ReportGenerator();
const summary = generator.generateSummary();
```

## Build

```bash
npm install
npm run build
```"""


FALLBACK_FILES: Tuple[Tuple[str, str], ...] = (
    ("src/types.ts", TYPES_TS),
    ("src/report-generator.ts", REPORT_GENERATOR_TS),
    ("src/index.ts", INDEX_TS),
    ("README.md", README_MD),
)

FALLBACK_PATHS: Tuple[str, ...] = tuple(path for path, _ in FALLBACK_FILES)


class FallbackGenerator:
    """Produces the fixed demonstration FileSet.

    The output depends only on the module's file table, never on the task,
    so repeated calls return the same paths in the same order.
    """

    def generate(self, task: Optional[TaskDescription] = None) -> FileSet:
        """Return the demonstration FileSet.

        Args:
            task: The task being processed. Only used for logging.

        Returns:
            FileSet with one edit per entry in FALLBACK_FILES.
        """
        edits: List[FileEdit] = [
            FileEdit(path=path, content=content)
            for path, content in FALLBACK_FILES
        ]

        logger.info(
            "Using fallback code generation",
            extra={
                "issue_number": task.issue_number if task else None,
                "files": len(edits),
            },
        )

        return FileSet(
            edits=edits,
            summary=(
                f"Generated {len(edits)} files for mystery shopper report "
                "system with TypeScript"
            ),
        )
